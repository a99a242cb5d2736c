"""In-memory durable store implementation."""

import copy
from collections.abc import AsyncIterator
from typing import Any

from rostercache.core.entities.collection import Collection


class InMemoryDurableStore:
    """Dictionary-backed store for tests and throwaway runs.

    Data lives as long as the process. No method suspends between
    reading and writing a key, so ``insert_if_absent`` is atomic with
    respect to other coroutines on the same event loop.
    """

    def __init__(self) -> None:
        self._data: dict[tuple[Collection, str], Any] = {}

    async def get(self, collection: Collection, email: str) -> Any | None:
        payload = self._data.get((Collection(collection), email))
        return copy.deepcopy(payload)

    async def set(self, collection: Collection, email: str, payload: Any) -> None:
        self._data[(Collection(collection), email)] = copy.deepcopy(payload)

    async def insert_if_absent(
        self,
        collection: Collection,
        email: str,
        payload: Any,
    ) -> bool:
        key = (Collection(collection), email)
        if key in self._data:
            return False
        self._data[key] = copy.deepcopy(payload)
        return True

    async def delete(self, collection: Collection, email: str) -> bool:
        return self._data.pop((Collection(collection), email), None) is not None

    async def scan(self, collection: Collection) -> AsyncIterator[tuple[str, Any]]:
        """Yield ``(email, payload)`` pairs in email order.

        The key set is fixed when iteration starts; keys deleted
        afterwards are skipped.
        """
        collection = Collection(collection)
        emails = sorted(email for (c, email) in self._data if c is collection)
        for email in emails:
            key = (collection, email)
            if key in self._data:
                yield email, copy.deepcopy(self._data[key])

    async def close(self) -> None:
        """Nothing to release."""

    def __len__(self) -> int:
        return len(self._data)
