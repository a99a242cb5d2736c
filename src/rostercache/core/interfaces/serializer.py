"""Serializer interface."""

from typing import Protocol

from rostercache.core.entities.collection import Collection
from rostercache.core.entities.snapshot import Snapshot


class ISerializer(Protocol):
    """Contract for encoding snapshots for the distributed tier.

    Serializers handle the conversion between snapshots and the
    bytes stored in cache backends.
    """

    def serialize(self, snapshot: Snapshot) -> bytes:
        """Serialize a snapshot to bytes.

        Args:
            snapshot: The snapshot to serialize.

        Returns:
            The serialized snapshot as bytes.

        Raises:
            SerializationError: If the snapshot cannot be serialized.
        """
        ...

    def deserialize(self, collection: Collection, data: bytes) -> Snapshot:
        """Deserialize bytes to a snapshot.

        Args:
            collection: The collection the cached snapshot belongs to.
            data: The bytes to deserialize.

        Returns:
            The rebuilt snapshot.

        Raises:
            SerializationError: If the data is not a valid snapshot.
        """
        ...
