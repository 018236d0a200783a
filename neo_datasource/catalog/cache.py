"""
Catalog caching layer.

The panel editor asks for the table list and a table's columns every time
it opens, so schema introspection results are kept in a small in-memory
TTL cache keyed by (backend address, catalog SQL).  Compiled panel
queries are never cached: their time range changes on every refresh.
"""
from __future__ import annotations

import time
import threading
from typing import Any

from neo_datasource.core.config import get_settings
from neo_datasource.core.logging import get_logger

logger = get_logger(__name__)

_Key = tuple[str, str]


class CatalogCache:
    """Thread-safe TTL cache; the first entry stored is the first evicted."""

    def __init__(self, ttl: float, max_size: int):
        # key -> (expires_at, value), kept in insertion order
        self._store: dict[_Key, tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self._ttl = ttl
        self._max_size = max_size
        self.hits = 0
        self.misses = 0

    def get(self, address: str, sql: str) -> Any | None:
        key = (address, sql)
        with self._lock:
            entry = self._store.get(key)
            if entry is not None and entry[0] < time.monotonic():
                del self._store[key]
                entry = None
            if entry is None:
                self.misses += 1
                return None
            self.hits += 1
            return entry[1]

    def put(self, address: str, sql: str, value: Any) -> None:
        key = (address, sql)
        with self._lock:
            self._store.pop(key, None)
            while self._store and len(self._store) >= self._max_size:
                del self._store[next(iter(self._store))]
            self._store[key] = (time.monotonic() + self._ttl, value)
            size = len(self._store)
        logger.debug("Catalog cache PUT %s size=%d", address, size)

    def clear(self) -> int:
        """Drop every entry; returns how many were removed."""
        with self._lock:
            count = len(self._store)
            self._store.clear()
        return count

    def __len__(self) -> int:
        return len(self._store)


_cache: CatalogCache | None = None


def get_catalog_cache() -> CatalogCache:
    """Return the process-wide cache, created from settings on first use."""
    global _cache
    if _cache is None:
        settings = get_settings()
        _cache = CatalogCache(
            ttl=settings.catalog_cache_ttl_seconds,
            max_size=settings.catalog_cache_max_size,
        )
    return _cache
