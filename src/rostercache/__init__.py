"""rostercache - quiz and goal registrations behind a tiered cache.

Records live in a durable key-value store keyed by collection and
email. Collection listings are served through a process-local cache
and a shared distributed cache, populated on a miss and invalidated
by every successful write.

Example:
    from rostercache import (
        CacheCoordinator,
        Collection,
        DefaultKeyBuilder,
        JsonSerializer,
        RecordService,
        RedisCacheBackend,
        SqliteDurableStore,
    )

    store = await SqliteDurableStore("data/roster.db").connect()
    coordinator = CacheCoordinator(
        store=store,
        backend=RedisCacheBackend(host="127.0.0.1", port=6379),
        key_builder=DefaultKeyBuilder(),
        serializer=JsonSerializer(),
    )
    service = RecordService(coordinator)

    await service.create(Collection.QUIZ, {"name": "Ann", "email": "ann@x.com"})
    snapshot = await service.list_records(Collection.QUIZ)

Serving over HTTP:
    from rostercache.api import create_app

    app = create_app()  # settings from REDIS_HOST, REDIS_PORT, REDIS_PASS, ...
"""

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
from rostercache.infrastructure import (
    DefaultKeyBuilder,
    InMemoryCacheBackend,
    InMemoryDurableStore,
    JsonSerializer,
    LocalSnapshotCache,
    RedisCacheBackend,
    SerializationError,
    SqliteDurableStore,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core entities
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
    "SerializationError",
    # Core interfaces
    "ICacheBackend",
    "IDurableStore",
    "IKeyBuilder",
    "ISerializer",
    # Core services
    "CacheCoordinator",
    "ListRenderer",
    "RecordService",
    # Infrastructure implementations
    "DefaultKeyBuilder",
    "InMemoryCacheBackend",
    "InMemoryDurableStore",
    "JsonSerializer",
    "LocalSnapshotCache",
    "RedisCacheBackend",
    "SqliteDurableStore",
]
