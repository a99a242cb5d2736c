"""Cache backend interface."""

from datetime import timedelta
from typing import Protocol


class ICacheBackend(Protocol):
    """Contract for the distributed cache tier.

    A backend maps one string key per collection to a serialized
    snapshot, and keeps a version counter per key that every
    invalidation increments. Any call may raise TierUnavailable when
    the backend cannot be reached; callers treat that as a miss.
    """

    async def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None when the key is absent or expired."""
        ...

    async def version(self, key: str) -> int:
        """Return how many times ``key`` has been invalidated."""
        ...

    async def set(
        self,
        key: str,
        value: bytes,
        ttl: timedelta | None = None,
        *,
        version: int | None = None,
    ) -> bool:
        """Store ``value`` under ``key``.

        Args:
            key: Collection key.
            value: Serialized snapshot.
            ttl: Expiry for this key. None falls back to the backend's default.
            version: When given, store only if the key's version still
                equals it. The check and the write are atomic.

        Returns:
            True if the value was stored.
        """
        ...

    async def invalidate(self, key: str) -> int:
        """Remove a key and increment its version in one step.

        Returns:
            The new version.
        """
        ...

    async def close(self) -> None:
        """Release connections held by the backend."""
        ...
