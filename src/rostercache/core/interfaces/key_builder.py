"""Key builder interface."""

from typing import Protocol

from rostercache.core.entities.collection import Collection


class IKeyBuilder(Protocol):
    """Contract for naming distributed cache entries.

    One key per collection; the key must be stable across processes
    so every instance shares the same entry.
    """

    def build(self, collection: Collection) -> str:
        """Build the cache key holding a collection's snapshot.

        Args:
            collection: The collection whose snapshot is cached.

        Returns:
            The distributed cache key.
        """
        ...
