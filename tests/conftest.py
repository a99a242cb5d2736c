"""Pytest configuration for rostercache tests."""

import asyncio
from collections.abc import AsyncIterator
from datetime import timedelta
from typing import Any

import pytest

from rostercache import (
    CacheConfig,
    CacheCoordinator,
    Collection,
    DefaultKeyBuilder,
    InMemoryCacheBackend,
    InMemoryDurableStore,
    JsonSerializer,
    RecordService,
    TierUnavailable,
)


class RecordingStore(InMemoryDurableStore):
    """In-memory store that counts scans and can hold one open.

    When ``gate`` is set, a scan reads its rows, sets ``scan_started``
    and waits for the gate before yielding anything.
    """

    def __init__(self) -> None:
        super().__init__()
        self.scans = 0
        self.gate: asyncio.Event | None = None
        self.scan_started: asyncio.Event | None = None

    async def scan(self, collection: Collection) -> AsyncIterator[tuple[str, Any]]:
        self.scans += 1
        rows = [row async for row in super().scan(collection)]
        if self.gate is not None:
            if self.scan_started is not None:
                self.scan_started.set()
            await self.gate.wait()
        for row in rows:
            yield row


class FlakyCacheBackend(InMemoryCacheBackend):
    """In-memory backend that can fail like an unreachable Redis.

    With ``available`` False every call raises TierUnavailable. When
    ``get_gate`` is set, ``get`` reads the value, sets ``get_started``
    and waits for the gate before returning it.
    """

    def __init__(self) -> None:
        super().__init__(maxsize=16)
        self.available = True
        self.get_gate: asyncio.Event | None = None
        self.get_started: asyncio.Event | None = None

    def _check(self, command: str) -> None:
        if not self.available:
            raise TierUnavailable(f"{command} refused: backend down")

    async def get(self, key: str) -> bytes | None:
        self._check("GET")
        value = await super().get(key)
        if self.get_gate is not None:
            if self.get_started is not None:
                self.get_started.set()
            await self.get_gate.wait()
        return value

    async def version(self, key: str) -> int:
        self._check("GET")
        return await super().version(key)

    async def set(
        self,
        key: str,
        value: bytes,
        ttl: timedelta | None = None,
        *,
        version: int | None = None,
    ) -> bool:
        self._check("SET")
        return await super().set(key, value, ttl, version=version)

    async def invalidate(self, key: str) -> int:
        self._check("DEL")
        return await super().invalidate(key)


def make_coordinator(
    store: InMemoryDurableStore,
    backend: InMemoryCacheBackend,
    config: CacheConfig | None = None,
) -> CacheCoordinator:
    """Build a coordinator over the given tiers, as one process would."""
    return CacheCoordinator(
        store=store,
        backend=backend,
        key_builder=DefaultKeyBuilder(prefix="test"),
        serializer=JsonSerializer(),
        config=config or CacheConfig(key_prefix="test"),
    )


@pytest.fixture
def store() -> RecordingStore:
    """Create a scan-counting in-memory store."""
    return RecordingStore()


@pytest.fixture
def backend() -> FlakyCacheBackend:
    """Create a distributed cache stand-in that can be switched off."""
    return FlakyCacheBackend()


@pytest.fixture
def coordinator(store: RecordingStore, backend: FlakyCacheBackend) -> CacheCoordinator:
    """Create a coordinator over the in-memory tiers."""
    return make_coordinator(store, backend)


@pytest.fixture
def coordinator_factory(store: RecordingStore, backend: FlakyCacheBackend):
    """Build further coordinators sharing the store and distributed tier.

    Each one stands for another process of the same deployment.
    """

    def factory(config: CacheConfig | None = None) -> CacheCoordinator:
        return make_coordinator(store, backend, config)

    return factory


@pytest.fixture
def service(coordinator: CacheCoordinator) -> RecordService:
    """Create a record service over the test coordinator."""
    return RecordService(coordinator)
