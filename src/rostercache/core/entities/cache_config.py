"""Cache configuration entity."""

from dataclasses import dataclass
from datetime import timedelta


@dataclass
class CacheConfig:
    """Cache configuration.

    Provides configuration options for the tiered cache: key naming,
    expiry of each tier and a global switch.

    With ``enabled=False`` every listing is served by a durable-store
    scan and neither cache tier is read or written.
    """

    enabled: bool = True
    key_prefix: str = "rostercache"

    # Distributed tier expiry (None keeps keys until invalidated)
    distributed_ttl: timedelta | None = None

    # Local tier expiry (None keeps snapshots until invalidated)
    local_ttl: timedelta | None = None

    def __post_init__(self) -> None:
        """Reject non-positive TTLs."""
        for name in ("distributed_ttl", "local_ttl"):
            ttl = getattr(self, name)
            if ttl is not None and ttl.total_seconds() <= 0:
                raise ValueError(f"{name} must be positive, got {ttl}")
