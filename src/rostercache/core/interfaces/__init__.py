"""Core interfaces (Protocol classes) for rostercache."""

from rostercache.core.interfaces.cache_backend import ICacheBackend
from rostercache.core.interfaces.durable_store import IDurableStore
from rostercache.core.interfaces.key_builder import IKeyBuilder
from rostercache.core.interfaces.serializer import ISerializer

__all__ = [
    "ICacheBackend",
    "IDurableStore",
    "IKeyBuilder",
    "ISerializer",
]
