"""Utility functions for the invoicing dashboard."""

from .pagination import PAGINATION_SIZES, ListingParams
from .view_cache import ViewCache, get_view_cache, revalidate_path

__all__ = [
    "PAGINATION_SIZES",
    "ListingParams",
    "ViewCache",
    "get_view_cache",
    "revalidate_path",
]
