"""Snapshot entity."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from rostercache.core.entities.collection import Collection
from rostercache.core.entities.record import Record, record_from_dict


@dataclass(frozen=True)
class Snapshot:
    """Immutable, complete enumeration of a collection.

    A snapshot is produced by a full durable-store scan and is never
    mutated afterwards; writes invalidate it instead. An empty snapshot
    is a legitimate populated state, distinct from "nothing cached".
    """

    collection: Collection
    records: tuple[Record, ...]
    created_at: datetime

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        """Check if the collection held no records when scanned."""
        return not self.records

    def to_list(self) -> list[dict[str, Any]]:
        """Return the listing representation of every record."""
        return [record.to_dict() for record in self.records]

    @classmethod
    def create(
        cls,
        collection: Collection,
        records: Iterable[Record],
    ) -> "Snapshot":
        """Factory method to create a new snapshot.

        Args:
            collection: The collection the records belong to.
            records: Records in store key order.

        Returns:
            A new Snapshot instance.
        """
        return cls(
            collection=Collection(collection),
            records=tuple(records),
            created_at=datetime.now(timezone.utc),
        )

    @classmethod
    def from_list(
        cls,
        collection: Collection,
        items: list[dict[str, Any]],
    ) -> "Snapshot":
        """Rebuild a snapshot from its listing representation.

        Raises:
            KeyError: If an item lacks a required field.
            TypeError: If an item is not a mapping.
        """
        return cls.create(
            collection,
            (record_from_dict(collection, item) for item in items),
        )
