"""Durable store interface."""

from collections.abc import AsyncIterator
from typing import Any, Protocol

from rostercache.core.entities.collection import Collection


class IDurableStore(Protocol):
    """Contract for the source-of-truth key-value store.

    Keys are ``(collection, email)`` pairs; values are the
    collection-specific record payloads (a JSON-compatible value).
    Every failure is raised as StoreError.
    """

    async def get(self, collection: Collection, email: str) -> Any | None:
        """Return the payload stored under a key, or None if absent."""
        ...

    async def set(self, collection: Collection, email: str, payload: Any) -> None:
        """Store a payload under a key, replacing any previous value."""
        ...

    async def insert_if_absent(
        self,
        collection: Collection,
        email: str,
        payload: Any,
    ) -> bool:
        """Atomically store a payload only if the key is free.

        Returns:
            True if the payload was stored, False if the key already existed.
        """
        ...

    async def delete(self, collection: Collection, email: str) -> bool:
        """Delete a key.

        Returns:
            True if the key existed and was deleted, False otherwise.
        """
        ...

    def scan(self, collection: Collection) -> AsyncIterator[tuple[str, Any]]:
        """Iterate every ``(email, payload)`` of a collection in key order.

        Each call opens a fresh cursor.
        """
        ...

    async def close(self) -> None:
        """Release the underlying connection."""
        ...
