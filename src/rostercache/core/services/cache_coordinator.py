"""Cache coordinator - orchestrates the three storage tiers."""

import asyncio
import logging
from collections.abc import Sequence

from rostercache.core.entities.cache_config import CacheConfig
from rostercache.core.entities.collection import Collection
from rostercache.core.entities.record import Record, record_type
from rostercache.core.entities.snapshot import Snapshot
from rostercache.core.exceptions import TierUnavailable
from rostercache.core.interfaces.cache_backend import ICacheBackend
from rostercache.core.interfaces.durable_store import IDurableStore
from rostercache.core.interfaces.key_builder import IKeyBuilder
from rostercache.core.interfaces.serializer import ISerializer
from rostercache.infrastructure.backends.local import LocalSnapshotCache
from rostercache.infrastructure.serializers.json import SerializationError

logger = logging.getLogger(__name__)


class CacheCoordinator:
    """Domain service owning every cache state transition.

    Listings are read through the local cache, then the distributed
    cache, then a full durable-store scan, populating the faster tiers
    on the way back. Successful writes invalidate both cache tiers
    before returning, so a listing started after a write returns never
    reflects the collection as it was before that write.

    The distributed tier is an optimization only: its failures are
    logged and counted, and the read falls through to the store. When
    an invalidation cannot reach it, the collection is marked suspect
    and the tier is bypassed for that collection until a later write
    to it succeeds.

    Point lookups go straight to the store and are never cached.
    """

    def __init__(
        self,
        store: IDurableStore,
        backend: ICacheBackend,
        key_builder: IKeyBuilder,
        serializer: ISerializer,
        config: CacheConfig | None = None,
        local: LocalSnapshotCache | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            store: The durable store, source of truth.
            backend: The distributed cache tier.
            key_builder: Names the distributed entry of each collection.
            serializer: Encodes snapshots for the distributed tier.
            config: Optional cache configuration. Uses defaults if not provided.
            local: Optional local cache. Built from the config if not provided.
        """
        self._store = store
        self._backend = backend
        self._key_builder = key_builder
        self._serializer = serializer
        self._config = config or CacheConfig()
        self._local = local or LocalSnapshotCache(ttl=self._config.local_ttl)

        # Collections whose distributed entry may be stale
        self._suspect: set[Collection] = set()

        # Statistics
        self._local_hits = 0
        self._distributed_hits = 0
        self._store_scans = 0
        self._distributed_errors = 0
        self._invalidations = 0

    @property
    def config(self) -> CacheConfig:
        """Get the cache configuration."""
        return self._config

    @property
    def store(self) -> IDurableStore:
        """Get the durable store."""
        return self._store

    @property
    def backend(self) -> ICacheBackend:
        """Get the distributed cache backend."""
        return self._backend

    @property
    def local(self) -> LocalSnapshotCache:
        """Get the local cache."""
        return self._local

    @property
    def stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with per-tier hits, scans, tier errors and invalidations.
        """
        return {
            "local_hits": self._local_hits,
            "distributed_hits": self._distributed_hits,
            "store_scans": self._store_scans,
            "distributed_errors": self._distributed_errors,
            "invalidations": self._invalidations,
        }

    async def list_records(self, collection: Collection) -> Snapshot:
        """Return the complete, ordered content of a collection.

        Args:
            collection: The collection to list.

        Returns:
            A snapshot from the fastest tier holding one.

        Raises:
            StoreError: If a scan is needed and the store fails.
        """
        collection = Collection(collection)
        if not self._config.enabled:
            return await self._scan(collection)

        snapshot = self._local.get(collection)
        if snapshot is not None:
            self._local_hits += 1
            return snapshot

        generation = self._local.generation(collection)

        snapshot = await self._read_distributed(collection)
        if snapshot is not None:
            self._distributed_hits += 1
            async with self._local.lock(collection):
                self._local.set(collection, snapshot, generation)
            return snapshot

        version = await self._read_version(collection)
        snapshot = await self._scan(collection)
        await self._populate(collection, snapshot, generation, version)
        return snapshot

    async def get_record(self, collection: Collection, email: str) -> Record | None:
        """Look up one record in the durable store.

        Returns:
            The record, or None if the email is not registered.
        """
        collection = Collection(collection)
        payload = await self._store.get(collection, email)
        if payload is None:
            return None
        return record_type(collection).from_payload(email, payload)

    async def create_record(self, collection: Collection, record: Record) -> bool:
        """Insert a record unless its email is already registered.

        The existence check and the write are one atomic store call,
        so concurrent creates of the same email cannot both succeed.

        Returns:
            True if the record was created, False if it already existed.
        """
        collection = self._check_record(collection, record)
        created = await self._store.insert_if_absent(
            collection, record.email, record.to_payload()
        )
        if created:
            await self.invalidate(collection)
        return created

    async def delete_record(self, collection: Collection, email: str) -> bool:
        """Delete a record.

        Returns:
            True if the record existed and was deleted, False otherwise.
        """
        collection = Collection(collection)
        deleted = await self._store.delete(collection, email)
        if deleted:
            await self.invalidate(collection)
        return deleted

    async def bulk_create(
        self,
        collection: Collection,
        records: Sequence[Record],
    ) -> int:
        """Insert many records concurrently, invalidating once.

        Emails already registered, or repeated within the batch, are
        skipped. Records must be validated beforehand.

        Returns:
            The number of records created.

        Raises:
            StoreError: If any write failed. The cache is still
                invalidated, since other writes may have landed.
        """
        collection = Collection(collection)
        for record in records:
            self._check_record(collection, record)

        results = await asyncio.gather(
            *(
                self._store.insert_if_absent(
                    collection, record.email, record.to_payload()
                )
                for record in records
            ),
            return_exceptions=True,
        )
        created = sum(1 for result in results if result is True)
        errors = [result for result in results if isinstance(result, BaseException)]

        if created or errors:
            await self.invalidate(collection)
        if errors:
            raise errors[0]
        return created

    async def invalidate(self, collection: Collection) -> None:
        """Return both cache tiers of a collection to unpopulated.

        The distributed invalidation also bumps the shared version, so
        scans already running in any process cannot publish afterwards.
        The local slot is invalidated again after it, so a read that
        fetched the old distributed entry while the invalidation was in
        flight cannot repopulate the local tier.
        """
        collection = Collection(collection)
        if not self._config.enabled:
            return

        async with self._local.lock(collection):
            self._local.invalidate(collection)
            key = self._key_builder.build(collection)
            try:
                await self._backend.invalidate(key)
            except TierUnavailable as e:
                self._distributed_errors += 1
                self._suspect.add(collection)
                logger.warning(
                    "Could not invalidate distributed entry %s, bypassing it: %s",
                    key,
                    e,
                )
            else:
                self._suspect.discard(collection)
            self._local.invalidate(collection)
        self._invalidations += 1

    async def clear(self) -> None:
        """Invalidate every collection."""
        for collection in Collection:
            await self.invalidate(collection)

    async def _scan(self, collection: Collection) -> Snapshot:
        """Build a fresh snapshot from a full store scan."""
        cls = record_type(collection)
        self._store_scans += 1
        records = [
            cls.from_payload(email, payload)
            async for email, payload in self._store.scan(collection)
        ]
        return Snapshot.create(collection, records)

    async def _populate(
        self,
        collection: Collection,
        snapshot: Snapshot,
        generation: int,
        version: int | None,
    ) -> None:
        """Store a freshly scanned snapshot in both cache tiers.

        The local tier is skipped if this process invalidated the
        collection since ``generation``; the distributed tier if any
        process did since ``version``, or if the version is unknown.
        """
        async with self._local.lock(collection):
            if not self._local.set(collection, snapshot, generation):
                logger.debug("Discarding %s snapshot invalidated during scan", collection)
                return
            await self._write_distributed(collection, snapshot, version)

    async def _read_distributed(self, collection: Collection) -> Snapshot | None:
        """Fetch a collection's snapshot from the distributed tier.

        Returns:
            The snapshot, or None on a miss, a tier failure or a
            collection marked suspect.
        """
        if collection in self._suspect:
            return None

        key = self._key_builder.build(collection)
        try:
            data = await self._backend.get(key)
        except TierUnavailable as e:
            self._distributed_errors += 1
            logger.warning("Distributed cache read of %s failed: %s", key, e)
            return None

        if data is None:
            return None

        try:
            return self._serializer.deserialize(collection, data)
        except SerializationError as e:
            logger.warning("Ignoring unreadable distributed entry %s: %s", key, e)
            return None

    async def _read_version(self, collection: Collection) -> int | None:
        """Read the distributed version of a collection before a scan.

        Returns:
            The version, or None if the tier could not be reached.
        """
        key = self._key_builder.build(collection)
        try:
            return await self._backend.version(key)
        except TierUnavailable as e:
            self._distributed_errors += 1
            logger.warning("Distributed version read of %s failed: %s", key, e)
            return None

    async def _write_distributed(
        self,
        collection: Collection,
        snapshot: Snapshot,
        version: int | None,
    ) -> None:
        """Best-effort write of a snapshot to the distributed tier.

        Written only if no process invalidated the collection since
        ``version`` was read.
        """
        if version is None:
            return
        key = self._key_builder.build(collection)
        try:
            data = self._serializer.serialize(snapshot)
            stored = await self._backend.set(
                key, data, self._config.distributed_ttl, version=version
            )
        except (TierUnavailable, SerializationError) as e:
            self._distributed_errors += 1
            logger.warning("Distributed cache write of %s failed: %s", key, e)
            return
        if stored:
            self._suspect.discard(collection)
        else:
            logger.debug("Discarding %s snapshot invalidated by another process", collection)

    def _check_record(self, collection: Collection, record: Record) -> Collection:
        collection = Collection(collection)
        expected = record_type(collection)
        if not isinstance(record, expected):
            raise TypeError(
                f"{collection} holds {expected.__name__}, got {type(record).__name__}"
            )
        return collection
