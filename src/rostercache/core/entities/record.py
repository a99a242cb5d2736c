"""Record entities stored in a collection."""

from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Union

from rostercache.core.entities.collection import Collection


@dataclass(frozen=True)
class QuizRecord:
    """A quiz participant.

    The durable payload is the bare name string; the email lives
    in the store key.
    """

    email: str
    name: str

    fields: ClassVar[tuple[str, ...]] = ("name", "email")

    def to_payload(self) -> str:
        """Return the value persisted under the record's key."""
        return self.name

    def to_dict(self) -> dict[str, Any]:
        """Return the listing representation, email first."""
        return asdict(self)

    @classmethod
    def from_payload(cls, email: str, payload: Any) -> "QuizRecord":
        """Rebuild a record from its store key and payload."""
        return cls(email=email, name=str(payload))


@dataclass(frozen=True)
class GoalRecord:
    """A goal participant with institution and location."""

    email: str
    name: str
    institution: str
    location: str

    fields: ClassVar[tuple[str, ...]] = ("name", "institution", "location", "email")

    def to_payload(self) -> dict[str, str]:
        """Return the value persisted under the record's key."""
        return {
            "name": self.name,
            "institution": self.institution,
            "location": self.location,
        }

    def to_dict(self) -> dict[str, Any]:
        """Return the listing representation, email first."""
        return asdict(self)

    @classmethod
    def from_payload(cls, email: str, payload: Any) -> "GoalRecord":
        """Rebuild a record from its store key and payload."""
        return cls(
            email=email,
            name=payload["name"],
            institution=payload["institution"],
            location=payload["location"],
        )


Record = Union[QuizRecord, GoalRecord]

RECORD_TYPES: dict[Collection, type[QuizRecord] | type[GoalRecord]] = {
    Collection.QUIZ: QuizRecord,
    Collection.GOAL: GoalRecord,
}


def record_type(collection: Collection) -> type[QuizRecord] | type[GoalRecord]:
    """Return the record class stored in a collection."""
    return RECORD_TYPES[Collection(collection)]


def record_from_dict(collection: Collection, data: dict[str, Any]) -> Record:
    """Build a record from its listing representation.

    Args:
        collection: The collection the record belongs to.
        data: Mapping with ``email`` and the collection's fields.

    Returns:
        The record instance.

    Raises:
        KeyError: If a required field is missing.
        TypeError: If a field is not a string.
    """
    cls = record_type(collection)
    values = {name: data[name] for name in cls.fields}
    for name, value in values.items():
        if not isinstance(value, str):
            raise TypeError(f"{name} must be a string, got {type(value).__name__}")
    return cls(**values)
