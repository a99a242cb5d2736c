"""JSON serializer implementation."""

import json
from typing import Any

from rostercache.core.entities.collection import Collection
from rostercache.core.entities.snapshot import Snapshot


class SerializationError(Exception):
    """Raised when serialization or deserialization fails."""

    pass


class JsonSerializer:
    """JSON serializer for cached snapshots.

    A snapshot is stored as a JSON array of record objects, the same
    shape the listing endpoints return, so other processes (or other
    languages) sharing the distributed cache can read it directly.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        """Initialize the JSON serializer.

        Args:
            encoding: Character encoding to use.
        """
        self._encoding = encoding

    def serialize(self, snapshot: Snapshot) -> bytes:
        """Serialize a snapshot to bytes.

        Args:
            snapshot: The snapshot to serialize.

        Returns:
            The serialized snapshot as bytes.

        Raises:
            SerializationError: If the snapshot cannot be serialized.
        """
        try:
            json_str = json.dumps(snapshot.to_list(), ensure_ascii=False)
            return json_str.encode(self._encoding)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to serialize snapshot: {e}") from e

    def deserialize(self, collection: Collection, data: bytes) -> Snapshot:
        """Deserialize bytes to a snapshot.

        Args:
            collection: The collection the cached snapshot belongs to.
            data: The bytes to deserialize.

        Returns:
            The rebuilt snapshot.

        Raises:
            SerializationError: If the data is not a JSON array of records.
        """
        try:
            items: Any = json.loads(data.decode(self._encoding))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SerializationError(f"Failed to deserialize data: {e}") from e

        if not isinstance(items, list):
            raise SerializationError(
                f"Expected a JSON array, got {type(items).__name__}"
            )

        try:
            return Snapshot.from_list(collection, items)
        except (KeyError, TypeError) as e:
            raise SerializationError(f"Malformed {collection} record: {e}") from e
