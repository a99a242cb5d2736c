"""Exception hierarchy for rostercache.

Each caller-facing error carries the HTTP status it maps to, so the
API layer can translate it without a lookup table.
"""


class RosterCacheError(Exception):
    """Base exception for rostercache errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(RosterCacheError):
    """Raised when input is malformed: missing fields, bad email, non-JSON."""

    status_code = 400


class DuplicateError(RosterCacheError):
    """Raised when creating a record whose email is already registered."""

    status_code = 400

    def __init__(self, message: str = "user already exists") -> None:
        super().__init__(message)


class NotFoundError(RosterCacheError):
    """Raised when a record does not exist."""

    status_code = 404

    def __init__(self, message: str = "user not found") -> None:
        super().__init__(message)


class StoreError(RosterCacheError):
    """Raised when the durable store is unreachable or fails.

    Not recoverable locally; the request fails.
    """

    status_code = 500


class TierUnavailable(RosterCacheError):
    """Raised by a distributed cache backend that cannot be reached.

    The coordinator recovers from it by treating the tier as a miss.
    """

    status_code = 503
