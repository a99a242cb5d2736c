"""Core domain layer for rostercache."""

from rostercache.core.entities import (
    CacheConfig,
    Collection,
    GoalRecord,
    QuizRecord,
    Record,
    Snapshot,
)
from rostercache.core.exceptions import (
    DuplicateError,
    NotFoundError,
    RosterCacheError,
    StoreError,
    TierUnavailable,
    ValidationError,
)
from rostercache.core.interfaces import (
    ICacheBackend,
    IDurableStore,
    IKeyBuilder,
    ISerializer,
)
from rostercache.core.services import CacheCoordinator, ListRenderer, RecordService

__all__ = [
    # Entities
    "CacheConfig",
    "Collection",
    "GoalRecord",
    "QuizRecord",
    "Record",
    "Snapshot",
    # Errors
    "RosterCacheError",
    "ValidationError",
    "DuplicateError",
    "NotFoundError",
    "StoreError",
    "TierUnavailable",
    # Interfaces
    "ICacheBackend",
    "IDurableStore",
    "IKeyBuilder",
    "ISerializer",
    # Services
    "CacheCoordinator",
    "ListRenderer",
    "RecordService",
]
