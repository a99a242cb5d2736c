"""SQLite durable store implementation."""

import json
import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import aiosqlite

from rostercache.core.entities.collection import Collection
from rostercache.core.exceptions import StoreError

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS records (
        collection TEXT NOT NULL,
        email TEXT NOT NULL,
        value TEXT NOT NULL,
        PRIMARY KEY (collection, email)
    )
"""


class SqliteDurableStore:
    """Durable store on a single SQLite table.

    Rows are keyed by ``(collection, email)`` and hold the record
    payload as JSON text. The primary key gives ordered prefix scans
    and lets ``insert_if_absent`` rely on ``ON CONFLICT DO NOTHING``
    instead of a separate existence check.

    Example:
        async with SqliteDurableStore("data/roster.db") as store:
            await store.insert_if_absent(Collection.QUIZ, "ann@x.com", "Ann")
    """

    def __init__(self, path: str | Path = MEMORY_PATH) -> None:
        """Initialize the store.

        Args:
            path: Database file, or ``":memory:"`` for a private
                in-memory database that lives as long as the connection.
        """
        self._path = str(path)
        self._db: aiosqlite.Connection | None = None

    @property
    def path(self) -> str:
        """Return the database location."""
        return self._path

    async def connect(self) -> "SqliteDurableStore":
        """Open the database and create the table if missing.

        Raises:
            StoreError: If the database cannot be opened.
        """
        if self._db is not None:
            return self
        if self._path != MEMORY_PATH:
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._db = await aiosqlite.connect(self._path)
            await self._db.execute(CREATE_TABLE)
            await self._db.commit()
        except (aiosqlite.Error, OSError) as e:
            raise StoreError(f"Cannot open database {self._path}: {e}") from e
        logger.info("Opened durable store at %s", self._path)
        return self

    @property
    def _conn(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StoreError("Durable store is not connected")
        return self._db

    async def get(self, collection: Collection, email: str) -> Any | None:
        try:
            async with self._conn.execute(
                "SELECT value FROM records WHERE collection = ? AND email = ?",
                (Collection(collection).value, email),
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to read {collection}/{email}: {e}") from e
        return None if row is None else json.loads(row[0])

    async def set(self, collection: Collection, email: str, payload: Any) -> None:
        try:
            await self._conn.execute(
                """INSERT INTO records (collection, email, value) VALUES (?, ?, ?)
                   ON CONFLICT (collection, email) DO UPDATE SET value = excluded.value""",
                (Collection(collection).value, email, json.dumps(payload)),
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to write {collection}/{email}: {e}") from e

    async def insert_if_absent(
        self,
        collection: Collection,
        email: str,
        payload: Any,
    ) -> bool:
        try:
            async with self._conn.execute(
                """INSERT INTO records (collection, email, value) VALUES (?, ?, ?)
                   ON CONFLICT (collection, email) DO NOTHING""",
                (Collection(collection).value, email, json.dumps(payload)),
            ) as cursor:
                inserted = cursor.rowcount == 1
            await self._conn.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to insert {collection}/{email}: {e}") from e
        return inserted

    async def delete(self, collection: Collection, email: str) -> bool:
        try:
            async with self._conn.execute(
                "DELETE FROM records WHERE collection = ? AND email = ?",
                (Collection(collection).value, email),
            ) as cursor:
                deleted = cursor.rowcount > 0
            await self._conn.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to delete {collection}/{email}: {e}") from e
        return deleted

    async def scan(self, collection: Collection) -> AsyncIterator[tuple[str, Any]]:
        """Yield ``(email, payload)`` pairs of a collection in email order."""
        try:
            async with self._conn.execute(
                "SELECT email, value FROM records WHERE collection = ? ORDER BY email",
                (Collection(collection).value,),
            ) as cursor:
                async for email, value in cursor:
                    yield email, json.loads(value)
        except aiosqlite.Error as e:
            raise StoreError(f"Failed to scan {collection}: {e}") from e

    async def ping(self) -> bool:
        """Check the connection with a trivial query."""
        try:
            async with self._conn.execute("SELECT 1") as cursor:
                await cursor.fetchone()
        except (aiosqlite.Error, StoreError) as e:
            logger.warning("Durable store ping failed: %s", e)
            return False
        return True

    async def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> "SqliteDurableStore":
        """Async context manager entry."""
        return await self.connect()

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Async context manager exit."""
        await self.close()
