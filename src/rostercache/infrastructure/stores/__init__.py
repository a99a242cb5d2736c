"""Durable store implementations."""

from rostercache.infrastructure.stores.memory import InMemoryDurableStore
from rostercache.infrastructure.stores.sqlite import SqliteDurableStore

__all__ = ["InMemoryDurableStore", "SqliteDurableStore"]
