"""Domain services for rostercache."""

from rostercache.core.services.cache_coordinator import CacheCoordinator
from rostercache.core.services.record_service import RecordService
from rostercache.core.services.renderer import ListRenderer

__all__ = [
    "CacheCoordinator",
    "ListRenderer",
    "RecordService",
]
