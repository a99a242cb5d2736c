"""Domain entities for rostercache."""

from rostercache.core.entities.cache_config import CacheConfig
from rostercache.core.entities.collection import Collection
from rostercache.core.entities.record import (
    GoalRecord,
    QuizRecord,
    Record,
    record_from_dict,
    record_type,
)
from rostercache.core.entities.snapshot import Snapshot

__all__ = [
    "CacheConfig",
    "Collection",
    "GoalRecord",
    "QuizRecord",
    "Record",
    "Snapshot",
    "record_from_dict",
    "record_type",
]
