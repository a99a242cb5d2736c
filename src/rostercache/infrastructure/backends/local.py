"""Process-local snapshot cache."""

import asyncio
from datetime import timedelta

from cachetools import LRUCache, TTLCache  # type: ignore[import-untyped]

from rostercache.core.entities.collection import Collection
from rostercache.core.entities.snapshot import Snapshot


class LocalSnapshotCache:
    """Per-process cache of the last known snapshot of each collection.

    Each collection slot is either unpopulated (``get`` returns None)
    or populated with a snapshot, which may be empty. Every
    invalidation bumps the slot's generation; a populate carrying an
    older generation is refused, so a scan that overlapped a write can
    never resurrect the pre-write listing.

    The methods themselves never suspend. ``lock`` hands out the
    per-collection lock the coordinator holds while a transition also
    touches the distributed tier.
    """

    def __init__(self, ttl: timedelta | None = None) -> None:
        """Initialize the local cache.

        Args:
            ttl: Optional expiry for populated slots. None keeps a
                snapshot until the collection is invalidated.
        """
        maxsize = len(Collection)
        self._entries: LRUCache[Collection, Snapshot]
        if ttl is None:
            self._entries = LRUCache(maxsize=maxsize)
        else:
            self._entries = TTLCache(maxsize=maxsize, ttl=ttl.total_seconds())
        self._generations: dict[Collection, int] = {c: 0 for c in Collection}
        self._locks: dict[Collection, asyncio.Lock] = {
            c: asyncio.Lock() for c in Collection
        }

    def get(self, collection: Collection) -> Snapshot | None:
        """Return the cached snapshot, or None when unpopulated."""
        return self._entries.get(Collection(collection))

    def set(self, collection: Collection, snapshot: Snapshot, generation: int) -> bool:
        """Populate a slot if no invalidation happened since ``generation``.

        Args:
            collection: The collection slot to populate.
            snapshot: The complete snapshot to cache.
            generation: The slot generation observed before the snapshot
                was read from a slower tier.

        Returns:
            True if the slot was populated, False if the snapshot is stale.
        """
        collection = Collection(collection)
        if generation != self._generations[collection]:
            return False
        self._entries[collection] = snapshot
        return True

    def invalidate(self, collection: Collection) -> None:
        """Return a slot to the unpopulated state."""
        collection = Collection(collection)
        self._generations[collection] += 1
        self._entries.pop(collection, None)

    def generation(self, collection: Collection) -> int:
        """Return the number of invalidations a slot has seen."""
        return self._generations[Collection(collection)]

    def lock(self, collection: Collection) -> asyncio.Lock:
        """Return the lock serializing a slot's tier transitions."""
        return self._locks[Collection(collection)]

    def clear(self) -> None:
        """Invalidate every slot."""
        for collection in Collection:
            self.invalidate(collection)

    def __len__(self) -> int:
        """Return the number of populated slots."""
        return len(self._entries)
