"""
Read-through caching of ``find`` results keyed by request URI.
"""

from __future__ import annotations

from logging import LoggerAdapter
from typing import Any, Optional

from ..adapters.base import CacheEngine
from ..core.logging import get_logger

READ_METHOD = "find"


class CacheGate:
    """
    Cache policy layered over CRUD calls.

    ``find`` results are looked up before the network call and stored after a
    successful response. Any other successful call deletes the entry for its own
    URI. Entries for other URIs that reference the same record (list queries,
    for instance) are left alone.
    """

    def __init__(self, engine: Optional[CacheEngine] = None, *, logger: Optional[LoggerAdapter] = None) -> None:
        self.engine = engine
        self.logger = logger or get_logger(__name__)

    @property
    def enabled(self) -> bool:
        return self.engine is not None

    def lookup(self, method_name: str, uri: str) -> Optional[Any]:
        """Return the cached result for ``uri`` or ``None`` on a miss."""

        if self.engine is None or method_name != READ_METHOD:
            return None
        cached = self.engine.get(uri)
        self.logger.debug("Cache lookup", extra={"url": uri, "cache": "miss" if cached is None else "hit"})
        return cached

    def record(self, method_name: str, uri: str, result: Any) -> None:
        """Store a ``find`` result or invalidate ``uri`` after a successful write."""

        if self.engine is None:
            return
        if method_name == READ_METHOD:
            self.engine.set(uri, result)
            self.logger.debug("Cache store", extra={"url": uri, "cache": "store"})
        else:
            self.engine.delete(uri)
            self.logger.debug("Cache invalidate", extra={"url": uri, "cache": "invalidate"})
