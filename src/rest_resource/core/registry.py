"""
Registry of collection descriptors.

Each collection is the ORM-side object that knows how to ``unserialize`` and
``cast`` records of one resource type. The adapter looks collections up by
name when normalizing responses.
"""

from __future__ import annotations

from typing import Iterator, List, Mapping, MutableMapping, Optional

from ..adapters.base import Collection


class CollectionRegistry:
    """In-memory catalogue of :class:`~rest_resource.adapters.base.Collection` objects."""

    def __init__(self) -> None:
        self._entries: MutableMapping[str, Collection] = {}

    def register(self, name: str, collection: Collection) -> None:
        """Register or overwrite a collection under ``name``."""

        self._entries[name] = collection

    def unregister(self, name: str) -> None:
        """Remove a collection from the catalogue."""

        self._entries.pop(name, None)

    def get(self, name: str) -> Optional[Collection]:
        """Retrieve a collection if present."""

        return self._entries.get(name)

    def require(self, name: str) -> Collection:
        """Retrieve a collection or raise an informative error."""

        collection = self.get(name)
        if collection is None:
            raise KeyError(f"Collection '{name}' is not registered.")
        return collection

    def names(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_mapping(cls, collections: Optional[Mapping[str, Collection]] = None) -> "CollectionRegistry":
        """Build a registry from a ``name -> collection`` mapping."""

        if isinstance(collections, CollectionRegistry):
            return collections
        registry = cls()
        for name, collection in (collections or {}).items():
            registry.register(name, collection)
        return registry
