"""Process configuration read from the environment."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta

from rostercache.core.entities.cache_config import CacheConfig

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass
class AppConfig:
    """Settings for one service process.

    Built once at startup by ``from_env``. An unset or empty
    ``REDIS_PASS`` means an unauthenticated Redis connection.
    """

    redis_host: str = "127.0.0.1"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_timeout: float = 2.0
    database_path: str = "data/roster.db"
    key_prefix: str = "rostercache"
    distributed_ttl: int | None = None
    local_ttl: int | None = None
    templates_dir: str | None = None
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Read settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Raises:
            ValueError: If a numeric variable does not parse.
        """
        env = os.environ if environ is None else environ

        def optional_int(name: str) -> int | None:
            value = env.get(name)
            return int(value) if value else None

        return cls(
            redis_host=env.get("REDIS_HOST") or cls.redis_host,
            redis_port=int(env.get("REDIS_PORT") or cls.redis_port),
            redis_password=env.get("REDIS_PASS") or None,
            redis_timeout=float(env.get("REDIS_TIMEOUT") or cls.redis_timeout),
            database_path=env.get("DATABASE_PATH") or cls.database_path,
            key_prefix=env.get("CACHE_KEY_PREFIX", cls.key_prefix),
            distributed_ttl=optional_int("CACHE_DISTRIBUTED_TTL"),
            local_ttl=optional_int("CACHE_LOCAL_TTL"),
            templates_dir=env.get("TEMPLATES_DIR") or None,
            log_level=(env.get("LOG_LEVEL") or cls.log_level).upper(),
            host=env.get("HOST") or cls.host,
            port=int(env.get("PORT") or cls.port),
        )

    def cache_config(self) -> CacheConfig:
        """Return the coordinator settings."""
        return CacheConfig(
            key_prefix=self.key_prefix,
            distributed_ttl=_seconds(self.distributed_ttl),
            local_ttl=_seconds(self.local_ttl),
        )


def _seconds(value: int | None) -> timedelta | None:
    return None if value is None else timedelta(seconds=value)


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler used by every module logger."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
