"""Default key builder implementation."""

from rostercache.core.entities.collection import Collection


class DefaultKeyBuilder:
    """Key builder producing ``<prefix>:<collection>`` keys.

    With an empty prefix the key is the bare collection tag, which
    matches deployments sharing a Redis database with other services
    that read the ``quiz`` and ``goal`` keys directly.
    """

    def __init__(self, prefix: str = "rostercache") -> None:
        """Initialize the key builder.

        Args:
            prefix: Prefix for all cache keys. May be empty.
        """
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        """Return the key prefix."""
        return self._prefix

    def build(self, collection: Collection) -> str:
        """Build the cache key holding a collection's snapshot.

        Args:
            collection: The collection whose snapshot is cached.

        Returns:
            The distributed cache key.
        """
        tag = Collection(collection).value
        if not self._prefix:
            return tag
        return f"{self._prefix}:{tag}"
