"""Infrastructure layer implementations for rostercache."""

from rostercache.infrastructure.backends import (
    InMemoryCacheBackend,
    LocalSnapshotCache,
    RedisCacheBackend,
)
from rostercache.infrastructure.key_builders import DefaultKeyBuilder
from rostercache.infrastructure.serializers import JsonSerializer, SerializationError
from rostercache.infrastructure.stores import InMemoryDurableStore, SqliteDurableStore

__all__ = [
    "DefaultKeyBuilder",
    "InMemoryCacheBackend",
    "InMemoryDurableStore",
    "JsonSerializer",
    "LocalSnapshotCache",
    "RedisCacheBackend",
    "SerializationError",
    "SqliteDurableStore",
]
