"""Query-string parameters of the invoice listing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from urllib.parse import urlencode

from flask import request

PAGINATION_SIZES: Tuple[int, ...] = (6, 10, 25, 50, 100)
MAX_QUERY_LENGTH = 100


@dataclass(frozen=True)
class ListingParams:
    """Search term and page window requested for the listing.

    Only these three values reach the database or the view cache; any other
    query-string parameters are ignored.
    """

    query: str = ""
    page: int = 1
    per_page: int = PAGINATION_SIZES[0]

    @classmethod
    def from_request(cls, default_per_page: int = PAGINATION_SIZES[0]):
        per_page = request.args.get("per_page", type=int)
        if per_page not in PAGINATION_SIZES:
            per_page = (
                default_per_page
                if default_per_page in PAGINATION_SIZES
                else PAGINATION_SIZES[0]
            )
        page = request.args.get("page", 1, type=int) or 1
        query = request.args.get("query", "").strip()[:MAX_QUERY_LENGTH]
        return cls(query=query, page=max(page, 1), per_page=per_page)

    @property
    def cache_variant(self) -> str:
        """Stable cache key for this combination of parameters."""
        return urlencode(
            [("page", self.page), ("per_page", self.per_page), ("query", self.query)]
        )

    def link_args(self, page: Optional[int]) -> Dict[str, str]:
        """Arguments for ``url_for`` pointing at ``page`` of the same search."""
        args = {"page": str(page or 1), "per_page": str(self.per_page)}
        if self.query:
            args["query"] = self.query
        return args
