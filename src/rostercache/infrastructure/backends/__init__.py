"""Cache tier backends."""

from rostercache.infrastructure.backends.local import LocalSnapshotCache
from rostercache.infrastructure.backends.memory import InMemoryCacheBackend
from rostercache.infrastructure.backends.redis import RedisCacheBackend

__all__ = [
    "InMemoryCacheBackend",
    "LocalSnapshotCache",
    "RedisCacheBackend",
]
