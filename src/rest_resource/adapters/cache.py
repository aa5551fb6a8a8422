"""
In-memory cache engine for the cache gate.
"""

from __future__ import annotations

from typing import Any, Optional

from cachetools import Cache, LRUCache, TTLCache

DEFAULT_MAXSIZE = 1024


class MemoryCacheEngine:
    """
    :class:`~rest_resource.adapters.base.CacheEngine` backed by :mod:`cachetools`.

    Parameters
    ----------
    maxsize:
        Maximum number of cached URIs before least recently used entries are evicted.
    ttl:
        Optional time-to-live in seconds. Without it entries live until evicted
        or invalidated.
    """

    def __init__(self, maxsize: int = DEFAULT_MAXSIZE, ttl: Optional[float] = None) -> None:
        self._store: Cache = TTLCache(maxsize=maxsize, ttl=ttl) if ttl else LRUCache(maxsize=maxsize)

    def get(self, key: str) -> Any:
        return self._store.get(key)

    def set(self, key: str, value: Any) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)
