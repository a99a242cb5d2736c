"""In-memory cache backend implementation."""

import time
from collections.abc import Callable
from datetime import timedelta

from cachetools import TLRUCache  # type: ignore[import-untyped]


class InMemoryCacheBackend:
    """Single-process stand-in for the Redis tier.

    Holds serialized snapshots as bytes, the same as Redis would, so
    the coordinator exercises its serializer either way. Entries expire
    after their own TTL (or ``default_ttl``) and the least recently
    used one is evicted when ``maxsize`` is reached. Versions are kept
    apart from the entries and never expire.
    """

    def __init__(
        self,
        maxsize: int = 128,
        default_ttl: float | None = 300.0,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the in-memory cache backend.

        Args:
            maxsize: Maximum number of keys held.
            default_ttl: TTL in seconds for keys set without one. None
                keeps them until invalidated or evicted.
            timer: Clock used for expiry.
        """
        self._maxsize = maxsize
        self._default_ttl = default_ttl
        self._cache: TLRUCache[str, tuple[bytes, float | None]] = TLRUCache(
            maxsize=maxsize,
            ttu=self._expires_at,
            timer=timer,
        )
        self._versions: dict[str, int] = {}

    @staticmethod
    def _expires_at(key: str, entry: tuple[bytes, float | None], now: float) -> float:
        ttl = entry[1]
        return float("inf") if ttl is None else now + ttl

    async def get(self, key: str) -> bytes | None:
        entry = self._cache.get(key)
        return None if entry is None else entry[0]

    async def version(self, key: str) -> int:
        return self._versions.get(key, 0)

    async def set(
        self,
        key: str,
        value: bytes,
        ttl: timedelta | None = None,
        *,
        version: int | None = None,
    ) -> bool:
        """Store a value, expiring after ``ttl`` or the default TTL.

        With ``version``, nothing is stored if the key was invalidated
        since that version was read.
        """
        if version is not None and self._versions.get(key, 0) != version:
            return False
        seconds = ttl.total_seconds() if ttl is not None else self._default_ttl
        self._cache[key] = (value, seconds)
        return True

    async def invalidate(self, key: str) -> int:
        self._cache.pop(key, None)
        self._versions[key] = self._versions.get(key, 0) + 1
        return self._versions[key]

    async def close(self) -> None:
        """Nothing to release."""

    def __len__(self) -> int:
        return len(self._cache)

    @property
    def maxsize(self) -> int:
        return self._maxsize
