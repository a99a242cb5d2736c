"""Record service - validation in front of the cache coordinator."""

import logging
from typing import Any

from rostercache.core.entities.collection import Collection
from rostercache.core.entities.record import Record, record_type
from rostercache.core.entities.snapshot import Snapshot
from rostercache.core.exceptions import DuplicateError, NotFoundError, ValidationError
from rostercache.core.services.cache_coordinator import CacheCoordinator
from rostercache.core.services.renderer import ListRenderer
from rostercache.utils.validation import has_fields, is_valid_email

logger = logging.getLogger(__name__)

INVALID_EMAIL = "Invalid email address"
MISSING_EMAIL = "Invalid request. email is required"


def shape_message(collection: Collection) -> str:
    """Describe the payload shape a collection accepts."""
    fields = ", ".join(f"{name}: string" for name in record_type(collection).fields)
    return f"Invalid user. data must be {{{fields}}}"


class RecordService:
    """Entry point for record operations.

    Checks payload shape and email syntax, then delegates to the
    cache coordinator. Failures are raised as ValidationError,
    DuplicateError or NotFoundError; nothing is written when
    validation fails.
    """

    def __init__(
        self,
        coordinator: CacheCoordinator,
        renderer: ListRenderer | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._renderer = renderer or ListRenderer()

    @property
    def coordinator(self) -> CacheCoordinator:
        return self._coordinator

    def parse(self, collection: Collection, payload: Any) -> Record:
        """Validate a payload and build the record it describes.

        Raises:
            ValidationError: If a field is missing or the email is malformed.
        """
        cls = record_type(collection)
        if not has_fields(payload, cls.fields):
            raise ValidationError(shape_message(collection))
        if not is_valid_email(payload["email"]):
            raise ValidationError(INVALID_EMAIL)
        return cls(**{name: payload[name] for name in cls.fields})

    async def create(self, collection: Collection, payload: Any) -> Record:
        """Register a new record.

        Raises:
            ValidationError: If the payload is invalid.
            DuplicateError: If the email is already registered.
        """
        collection = Collection(collection)
        record = self.parse(collection, payload)
        if not await self._coordinator.create_record(collection, record):
            raise DuplicateError()
        logger.info("Created %s record %s", collection, record.email)
        return record

    async def get(self, collection: Collection, email: str) -> Record:
        """Fetch one record.

        Raises:
            ValidationError: If no email is given.
            NotFoundError: If the email is not registered.
        """
        if not email:
            raise ValidationError(MISSING_EMAIL)
        record = await self._coordinator.get_record(collection, email)
        if record is None:
            raise NotFoundError()
        return record

    async def delete(self, collection: Collection, email: str) -> None:
        """Delete one record.

        Raises:
            ValidationError: If no email is given.
            NotFoundError: If the email is not registered.
        """
        if not email:
            raise ValidationError(MISSING_EMAIL)
        if not await self._coordinator.delete_record(collection, email):
            raise NotFoundError()
        logger.info("Deleted %s record %s", Collection(collection), email)

    async def list_records(self, collection: Collection) -> Snapshot:
        """Return every record of a collection in email order."""
        return await self._coordinator.list_records(collection)

    async def render(self, collection: Collection) -> str:
        """Return the HTML listing of a collection."""
        snapshot = await self._coordinator.list_records(collection)
        return self._renderer.render(snapshot)

    async def bulk_create(self, collection: Collection, payloads: Any) -> int:
        """Register a batch of records.

        The whole batch is validated before anything is written; the
        first invalid entry rejects the call. Emails already registered
        are skipped.

        Returns:
            The number of records created.

        Raises:
            ValidationError: If the batch is not a list or an entry is invalid.
        """
        collection = Collection(collection)
        if not isinstance(payloads, list):
            raise ValidationError("Invalid request. data must be a JSON array of users")

        records: list[Record] = []
        for index, payload in enumerate(payloads):
            records.append(self._parse_batch_entry(collection, index, payload))

        created = await self._coordinator.bulk_create(collection, records)
        logger.info(
            "Bulk upload created %d of %d %s records", created, len(records), collection
        )
        return created

    def _parse_batch_entry(
        self,
        collection: Collection,
        index: int,
        payload: Any,
    ) -> Record:
        try:
            return self.parse(collection, payload)
        except ValidationError as e:
            if e.message == INVALID_EMAIL:
                raise ValidationError(f"{INVALID_EMAIL} at {payload['email']}") from e
            raise ValidationError(f"{e.message} (entry {index})") from e

