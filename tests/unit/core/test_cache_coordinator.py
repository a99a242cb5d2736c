"""Tests for CacheCoordinator."""

import pytest

from rostercache import (
    CacheConfig,
    CacheCoordinator,
    Collection,
    DefaultKeyBuilder,
    GoalRecord,
    InMemoryDurableStore,
    JsonSerializer,
    QuizRecord,
    StoreError,
    TierUnavailable,
)

ANN = QuizRecord(email="ann@x.com", name="Ann")
BOB = QuizRecord(email="bob@x.com", name="Bob")
CY = GoalRecord(email="cy@x.com", name="Cy", institution="MIT", location="Boston")


def emails(snapshot) -> list[str]:
    return [record.email for record in snapshot]


class TestReadThrough:
    """Tests for the local -> distributed -> store read path."""

    @pytest.mark.asyncio
    async def test_first_listing_scans_store(self, coordinator, store, backend) -> None:
        """A cold listing scans the store and fills both tiers."""
        await store.set(Collection.QUIZ, "ann@x.com", "Ann")

        snapshot = await coordinator.list_records(Collection.QUIZ)

        assert snapshot.to_list() == [{"email": "ann@x.com", "name": "Ann"}]
        assert store.scans == 1
        assert coordinator.stats["store_scans"] == 1
        assert coordinator.local.get(Collection.QUIZ) is snapshot
        assert await backend.get("test:quiz") == b'[{"email": "ann@x.com", "name": "Ann"}]'

    @pytest.mark.asyncio
    async def test_second_listing_served_locally(self, coordinator, store) -> None:
        """A warm listing returns the cached snapshot unchanged."""
        await store.set(Collection.QUIZ, "ann@x.com", "Ann")

        first = await coordinator.list_records(Collection.QUIZ)
        second = await coordinator.list_records(Collection.QUIZ)

        assert second is first
        assert store.scans == 1
        assert coordinator.stats["local_hits"] == 1

    @pytest.mark.asyncio
    async def test_distributed_hit_populates_local(
        self, coordinator_factory, store, backend
    ) -> None:
        """A process with a cold local tier reuses the shared snapshot."""
        await store.set(Collection.GOAL, "cy@x.com", CY.to_payload())
        await coordinator_factory().list_records(Collection.GOAL)
        other = coordinator_factory()

        snapshot = await other.list_records(Collection.GOAL)

        assert list(snapshot) == [CY]
        assert store.scans == 1
        assert other.stats["distributed_hits"] == 1
        assert other.local.get(Collection.GOAL) == snapshot

        await other.list_records(Collection.GOAL)
        assert other.stats["local_hits"] == 1

    @pytest.mark.asyncio
    async def test_empty_collection_is_cached(self, coordinator, store) -> None:
        """An empty collection is a populated state, not a permanent miss."""
        first = await coordinator.list_records(Collection.QUIZ)
        second = await coordinator.list_records(Collection.QUIZ)

        assert first.is_empty
        assert second is first
        assert store.scans == 1

    @pytest.mark.asyncio
    async def test_empty_distributed_entry_is_a_hit(self, coordinator, store, backend) -> None:
        """An empty shared snapshot is served without scanning."""
        await backend.set("test:quiz", b"[]")

        snapshot = await coordinator.list_records(Collection.QUIZ)

        assert snapshot.is_empty
        assert store.scans == 0
        assert coordinator.stats["distributed_hits"] == 1

    @pytest.mark.asyncio
    async def test_listing_is_ordered_by_email(self, coordinator, store) -> None:
        """Records come back in store key order, not insertion order."""
        for email in ["zed@x.com", "amy@x.com", "kim@x.com"]:
            await store.set(Collection.QUIZ, email, email.split("@")[0])

        snapshot = await coordinator.list_records(Collection.QUIZ)

        assert emails(snapshot) == ["amy@x.com", "kim@x.com", "zed@x.com"]

    @pytest.mark.asyncio
    async def test_listing_identical_across_tiers(
        self, coordinator, coordinator_factory, store
    ) -> None:
        """Store, local and distributed tiers serve the same snapshot."""
        await store.set(Collection.GOAL, "cy@x.com", CY.to_payload())
        await store.set(
            Collection.GOAL,
            "al@x.com",
            {"name": "Al", "institution": "ETH", "location": "Zurich"},
        )

        scanned = await coordinator.list_records(Collection.GOAL)
        local = await coordinator.list_records(Collection.GOAL)
        distributed = await coordinator_factory().list_records(Collection.GOAL)

        assert scanned.to_list() == local.to_list() == distributed.to_list()
        assert emails(distributed) == ["al@x.com", "cy@x.com"]

    @pytest.mark.asyncio
    async def test_collections_cached_independently(self, coordinator, store) -> None:
        """Each collection has its own slot."""
        await store.set(Collection.QUIZ, "ann@x.com", "Ann")
        await store.set(Collection.GOAL, "cy@x.com", CY.to_payload())

        quiz = await coordinator.list_records(Collection.QUIZ)
        goal = await coordinator.list_records(Collection.GOAL)

        assert list(quiz) == [ANN]
        assert list(goal) == [CY]
        assert store.scans == 2

    @pytest.mark.asyncio
    async def test_disabled_cache_always_scans(self, coordinator_factory, store, backend) -> None:
        """With caching disabled neither tier is touched."""
        coordinator = coordinator_factory(CacheConfig(enabled=False, key_prefix="test"))
        await coordinator.create_record(Collection.QUIZ, ANN)

        await coordinator.list_records(Collection.QUIZ)
        await coordinator.list_records(Collection.QUIZ)

        assert store.scans == 2
        assert len(backend) == 0
        assert coordinator.local.get(Collection.QUIZ) is None

    @pytest.mark.asyncio
    async def test_accepts_collection_name(self, coordinator, store) -> None:
        """Plain collection names are accepted."""
        await store.set(Collection.QUIZ, "ann@x.com", "Ann")

        snapshot = await coordinator.list_records("quiz")

        assert snapshot.collection is Collection.QUIZ


class TestWriteInvalidate:
    """Tests for writes and the invalidation they trigger."""

    @pytest.mark.asyncio
    async def test_create_invalidates_both_tiers(self, coordinator, backend) -> None:
        """A create clears the local slot and the distributed entry."""
        await coordinator.create_record(Collection.QUIZ, ANN)
        await coordinator.list_records(Collection.QUIZ)
        assert await backend.get("test:quiz") is not None

        created = await coordinator.create_record(Collection.QUIZ, BOB)

        assert created is True
        assert coordinator.local.get(Collection.QUIZ) is None
        assert await backend.get("test:quiz") is None

    @pytest.mark.asyncio
    async def test_listing_reflects_create(self, coordinator) -> None:
        """A listing after a create includes the new record."""
        await coordinator.create_record(Collection.QUIZ, ANN)
        assert emails(await coordinator.list_records(Collection.QUIZ)) == ["ann@x.com"]

        await coordinator.create_record(Collection.QUIZ, BOB)

        assert emails(await coordinator.list_records(Collection.QUIZ)) == [
            "ann@x.com",
            "bob@x.com",
        ]

    @pytest.mark.asyncio
    async def test_listing_reflects_delete(self, coordinator) -> None:
        """A listing after a delete omits the deleted record."""
        await coordinator.create_record(Collection.QUIZ, ANN)
        await coordinator.create_record(Collection.QUIZ, BOB)
        await coordinator.list_records(Collection.QUIZ)

        deleted = await coordinator.delete_record(Collection.QUIZ, "ann@x.com")

        assert deleted is True
        assert emails(await coordinator.list_records(Collection.QUIZ)) == ["bob@x.com"]

    @pytest.mark.asyncio
    async def test_duplicate_create_changes_nothing(self, coordinator, store) -> None:
        """A second create of the same email is refused without side effects."""
        await coordinator.create_record(Collection.QUIZ, ANN)
        snapshot = await coordinator.list_records(Collection.QUIZ)
        invalidations = coordinator.stats["invalidations"]

        created = await coordinator.create_record(
            Collection.QUIZ, QuizRecord(email="ann@x.com", name="Impostor")
        )

        assert created is False
        assert await store.get(Collection.QUIZ, "ann@x.com") == "Ann"
        assert coordinator.stats["invalidations"] == invalidations
        assert coordinator.local.get(Collection.QUIZ) is snapshot

    @pytest.mark.asyncio
    async def test_delete_missing_record(self, coordinator) -> None:
        """Deleting an unknown email reports False and keeps the cache."""
        snapshot = await coordinator.list_records(Collection.QUIZ)

        assert await coordinator.delete_record(Collection.QUIZ, "nobody@x.com") is False
        assert coordinator.local.get(Collection.QUIZ) is snapshot

    @pytest.mark.asyncio
    async def test_write_leaves_other_collection_cached(self, coordinator) -> None:
        """Invalidation is scoped to the written collection."""
        await coordinator.list_records(Collection.QUIZ)
        goal = await coordinator.list_records(Collection.GOAL)

        await coordinator.create_record(Collection.QUIZ, ANN)

        assert coordinator.local.get(Collection.QUIZ) is None
        assert coordinator.local.get(Collection.GOAL) is goal

    @pytest.mark.asyncio
    async def test_write_visible_to_fresh_process(self, coordinator_factory) -> None:
        """A write in one process clears the shared entry for every other."""
        writer = coordinator_factory()
        await coordinator_factory().list_records(Collection.QUIZ)

        await writer.create_record(Collection.QUIZ, ANN)

        assert emails(await coordinator_factory().list_records(Collection.QUIZ)) == [
            "ann@x.com"
        ]

    @pytest.mark.asyncio
    async def test_create_rejects_wrong_record_type(self, coordinator) -> None:
        """A goal record cannot be stored in the quiz collection."""
        with pytest.raises(TypeError):
            await coordinator.create_record(Collection.QUIZ, CY)

    @pytest.mark.asyncio
    async def test_clear_invalidates_every_collection(self, coordinator, backend) -> None:
        """clear() empties both tiers for all collections."""
        await coordinator.list_records(Collection.QUIZ)
        await coordinator.list_records(Collection.GOAL)

        await coordinator.clear()

        assert len(coordinator.local) == 0
        assert len(backend) == 0


class TestPointLookups:
    """Tests for get_record."""

    @pytest.mark.asyncio
    async def test_round_trip(self, coordinator) -> None:
        """A created record reads back with equal fields."""
        await coordinator.create_record(Collection.GOAL, CY)

        assert await coordinator.get_record(Collection.GOAL, "cy@x.com") == CY

    @pytest.mark.asyncio
    async def test_missing_record(self, coordinator) -> None:
        """An unknown email reads as None."""
        assert await coordinator.get_record(Collection.QUIZ, "nobody@x.com") is None

    @pytest.mark.asyncio
    async def test_lookups_bypass_cache(self, coordinator, store, backend) -> None:
        """Point lookups neither read nor fill the cache tiers."""
        await coordinator.create_record(Collection.QUIZ, ANN)

        await coordinator.get_record(Collection.QUIZ, "ann@x.com")

        assert store.scans == 0
        assert coordinator.local.get(Collection.QUIZ) is None
        assert len(backend) == 0


class TestBulkCreate:
    """Tests for bulk_create."""

    @pytest.mark.asyncio
    async def test_creates_all_and_invalidates_once(self, coordinator) -> None:
        """Every new record is written and the cache cleared once."""
        await coordinator.create_record(Collection.GOAL, CY)
        await coordinator.list_records(Collection.GOAL)
        invalidations = coordinator.stats["invalidations"]
        batch = [
            GoalRecord(email=f"u{i}@x.com", name=f"U{i}", institution="Uni", location="City")
            for i in range(5)
        ]

        count = await coordinator.bulk_create(Collection.GOAL, batch)

        assert count == 5
        assert coordinator.stats["invalidations"] == invalidations + 1
        listed = await coordinator.list_records(Collection.GOAL)
        assert emails(listed) == ["cy@x.com"] + [f"u{i}@x.com" for i in range(5)]

    @pytest.mark.asyncio
    async def test_skips_existing_and_repeated_emails(self, coordinator, store) -> None:
        """Registered or repeated emails are not written twice."""
        await coordinator.create_record(Collection.GOAL, CY)
        batch = [
            GoalRecord(email="cy@x.com", name="Other", institution="X", location="Y"),
            GoalRecord(email="dee@x.com", name="Dee", institution="X", location="Y"),
            GoalRecord(email="dee@x.com", name="Dee2", institution="X", location="Y"),
        ]

        count = await coordinator.bulk_create(Collection.GOAL, batch)

        assert count == 1
        assert (await store.get(Collection.GOAL, "cy@x.com"))["name"] == "Cy"

    @pytest.mark.asyncio
    async def test_nothing_created_keeps_cache(self, coordinator) -> None:
        """A batch of duplicates does not invalidate."""
        await coordinator.create_record(Collection.GOAL, CY)
        snapshot = await coordinator.list_records(Collection.GOAL)

        assert await coordinator.bulk_create(Collection.GOAL, [CY]) == 0
        assert coordinator.local.get(Collection.GOAL) is snapshot

    @pytest.mark.asyncio
    async def test_store_failure_still_invalidates(self, backend) -> None:
        """Writes that landed before a failure are visible afterwards."""

        class FailingStore(InMemoryDurableStore):
            async def insert_if_absent(self, collection, email, payload):
                if email == "bad@x.com":
                    raise StoreError("disk full")
                return await super().insert_if_absent(collection, email, payload)

        store = FailingStore()
        coordinator = CacheCoordinator(
            store=store,
            backend=backend,
            key_builder=DefaultKeyBuilder(prefix="test"),
            serializer=JsonSerializer(),
        )
        await coordinator.list_records(Collection.GOAL)
        batch = [
            GoalRecord(email="ok@x.com", name="Ok", institution="X", location="Y"),
            GoalRecord(email="bad@x.com", name="Bad", institution="X", location="Y"),
        ]

        with pytest.raises(StoreError):
            await coordinator.bulk_create(Collection.GOAL, batch)

        assert emails(await coordinator.list_records(Collection.GOAL)) == ["ok@x.com"]


class TestDistributedFailures:
    """Tests for degraded operation when the distributed tier is down."""

    @pytest.mark.asyncio
    async def test_listing_falls_back_to_store(self, coordinator, store, backend) -> None:
        """An unreachable tier is a miss; the read still succeeds."""
        await store.set(Collection.QUIZ, "ann@x.com", "Ann")
        backend.available = False

        snapshot = await coordinator.list_records(Collection.QUIZ)

        assert list(snapshot) == [ANN]
        assert coordinator.stats["distributed_errors"] == 2
        assert coordinator.local.get(Collection.QUIZ) is snapshot

    @pytest.mark.asyncio
    async def test_writes_succeed_while_tier_down(self, coordinator, backend) -> None:
        """Creates and deletes do not depend on the distributed tier."""
        backend.available = False

        assert await coordinator.create_record(Collection.QUIZ, ANN) is True
        assert emails(await coordinator.list_records(Collection.QUIZ)) == ["ann@x.com"]
        assert await coordinator.delete_record(Collection.QUIZ, "ann@x.com") is True
        assert emails(await coordinator.list_records(Collection.QUIZ)) == []

    @pytest.mark.asyncio
    async def test_failed_invalidation_bypasses_stale_entry(self, coordinator, backend) -> None:
        """A distributed entry that could not be deleted is never served."""
        await coordinator.create_record(Collection.QUIZ, ANN)
        await coordinator.list_records(Collection.QUIZ)

        backend.available = False
        await coordinator.create_record(Collection.QUIZ, BOB)
        backend.available = True

        # The stale [ann] entry is still in the backend
        assert b"bob" not in await backend.get("test:quiz")
        snapshot = await coordinator.list_records(Collection.QUIZ)

        assert emails(snapshot) == ["ann@x.com", "bob@x.com"]
        assert coordinator.stats["distributed_hits"] == 0
        assert b"bob@x.com" in await backend.get("test:quiz")

    @pytest.mark.asyncio
    async def test_bypass_lifted_after_successful_write(self, coordinator, coordinator_factory, backend) -> None:
        """Once a fresh snapshot is stored the tier is read again."""
        await coordinator.create_record(Collection.QUIZ, ANN)
        backend.available = False
        await coordinator.create_record(Collection.QUIZ, BOB)
        backend.available = True
        await coordinator.list_records(Collection.QUIZ)

        await coordinator.delete_record(Collection.QUIZ, "ann@x.com")
        await coordinator_factory().list_records(Collection.QUIZ)
        snapshot = await coordinator.list_records(Collection.QUIZ)

        assert emails(snapshot) == ["bob@x.com"]
        assert coordinator.stats["distributed_hits"] == 1

    @pytest.mark.asyncio
    async def test_unreadable_entry_is_a_miss(self, coordinator, store, backend) -> None:
        """A corrupt shared entry is ignored and overwritten."""
        await store.set(Collection.QUIZ, "ann@x.com", "Ann")
        await backend.set("test:quiz", b"not json")

        snapshot = await coordinator.list_records(Collection.QUIZ)

        assert list(snapshot) == [ANN]
        assert store.scans == 1
        assert await backend.get("test:quiz") == b'[{"email": "ann@x.com", "name": "Ann"}]'

    @pytest.mark.asyncio
    async def test_non_string_field_entry_is_a_miss(self, coordinator, store, backend) -> None:
        """A shared entry with a non-string field is ignored and replaced."""
        await store.set(Collection.QUIZ, "ann@x.com", "Ann")
        await backend.set("test:quiz", b'[{"email": "ann@x.com", "name": 5}]')

        snapshot = await coordinator.list_records(Collection.QUIZ)

        assert list(snapshot) == [ANN]
        assert coordinator.stats["distributed_hits"] == 0
        assert await backend.get("test:quiz") == b'[{"email": "ann@x.com", "name": "Ann"}]'

    @pytest.mark.asyncio
    async def test_unknown_version_skips_shared_write(self, coordinator, store, backend) -> None:
        """Without a version read before the scan, nothing is published."""
        await store.set(Collection.QUIZ, "ann@x.com", "Ann")

        async def unreachable(key: str) -> int:
            raise TierUnavailable("GET refused")

        backend.version = unreachable

        assert list(await coordinator.list_records(Collection.QUIZ)) == [ANN]
        assert await backend.get("test:quiz") is None
        assert coordinator.stats["distributed_errors"] == 1
