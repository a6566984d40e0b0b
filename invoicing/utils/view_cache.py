"""App-scoped cache of listing view data."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional

from flask import current_app, request

DEFAULT_MAX_VARIANTS = 64


def _normalise(path: str) -> str:
    return path.rstrip("/") or "/"


class ViewCache:
    """Store view data keyed by request path and a per-path variant.

    Entries hold query results rather than rendered HTML so per-request
    content such as CSRF tokens and flashed messages is never shared. Each
    path keeps at most ``max_variants`` entries; the least recently used one
    is evicted first.
    """

    def __init__(self, max_variants: int = DEFAULT_MAX_VARIANTS) -> None:
        self.max_variants = max_variants
        self._entries: Dict[str, "OrderedDict[str, Any]"] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    def get(self, path: str, variant: str = "") -> Optional[Any]:
        with self._lock:
            variants = self._entries.get(_normalise(path))
            if not variants or variant not in variants:
                return None
            variants.move_to_end(variant)
            return variants[variant]

    # ------------------------------------------------------------------
    def set(self, path: str, variant: str, value: Any) -> None:
        with self._lock:
            variants = self._entries.setdefault(_normalise(path), OrderedDict())
            variants[variant] = value
            variants.move_to_end(variant)
            while len(variants) > self.max_variants:
                variants.popitem(last=False)

    # ------------------------------------------------------------------
    def size(self, path: str) -> int:
        with self._lock:
            return len(self._entries.get(_normalise(path), ()))

    # ------------------------------------------------------------------
    def get_or_load(
        self, load: Callable[[], Any], variant: str = "", path: Optional[str] = None
    ) -> Any:
        """Return the cached value for ``variant`` or load and store it.

        ``path`` defaults to the current request's path.
        """
        path = path or request.path
        cached = self.get(path, variant)
        if cached is not None:
            return cached
        value = load()
        self.set(path, variant, value)
        return value

    # ------------------------------------------------------------------
    def revalidate_path(self, path: str) -> None:
        """Drop every cached variant of ``path``."""
        with self._lock:
            dropped = self._entries.pop(_normalise(path), None)
        if dropped:
            current_app.logger.debug(
                "Revalidated %s (%d cached variants)", path, len(dropped)
            )

    # ------------------------------------------------------------------
    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


# ----------------------------------------------------------------------
def init_view_cache(app) -> ViewCache:
    cache = app.extensions.get("view_cache")
    if cache is None:
        app.config.setdefault("VIEW_CACHE_MAX_VARIANTS", DEFAULT_MAX_VARIANTS)
        cache = app.extensions["view_cache"] = ViewCache(
            app.config["VIEW_CACHE_MAX_VARIANTS"]
        )
    return cache


def get_view_cache() -> ViewCache:
    """Return the view cache of the current application."""
    return init_view_cache(current_app._get_current_object())


def revalidate_path(path: str) -> None:
    """Invalidate cached data for ``path`` in the current application."""
    get_view_cache().revalidate_path(path)
