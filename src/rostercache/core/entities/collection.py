"""Collection entity."""

from enum import Enum


class Collection(str, Enum):
    """Closed set of record collections.

    The value names both the durable-store key prefix and the
    cache-tier slot for the collection.
    """

    QUIZ = "quiz"
    GOAL = "goal"

    def __str__(self) -> str:
        return self.value
