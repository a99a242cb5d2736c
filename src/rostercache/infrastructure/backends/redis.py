"""Redis cache backend implementation."""

import logging
from datetime import timedelta
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from rostercache.core.exceptions import TierUnavailable

logger = logging.getLogger(__name__)

VERSION_SUFFIX = ":version"

# KEYS: version key, value key. ARGV: expected version, value, ttl seconds (0 = none)
SET_IF_VERSION = """
local current = tonumber(redis.call('GET', KEYS[1]) or '0')
if current ~= tonumber(ARGV[1]) then
    return 0
end
local ttl = tonumber(ARGV[3])
if ttl > 0 then
    redis.call('SET', KEYS[2], ARGV[2], 'EX', ttl)
else
    redis.call('SET', KEYS[2], ARGV[2])
end
return 1
"""

# KEYS: version key, value key
INVALIDATE = """
redis.call('DEL', KEYS[2])
return redis.call('INCR', KEYS[1])
"""


class RedisCacheBackend:
    """Redis backend for the distributed cache tier.

    Shared by every process of a deployment. Each key has a companion
    ``<key>:version`` counter; invalidation deletes the key and
    increments the counter in one script, and a versioned ``set``
    writes only while the counter is unchanged, so a snapshot scanned
    before another process's write cannot be stored after it.

    Connection failures, timeouts and protocol errors are raised as
    TierUnavailable so the coordinator can fall back to the durable
    store.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 6379,
        password: Optional[str] = None,
        default_ttl: Optional[int] = None,
        socket_timeout: Optional[float] = 2.0,
        client: Optional[redis.Redis] = None,
    ) -> None:
        """Initialize the Redis cache backend.

        Args:
            host: Redis host name.
            port: Redis port.
            password: Redis password. None connects unauthenticated.
            default_ttl: Default TTL in seconds. None keeps keys until invalidated.
            socket_timeout: Timeout in seconds for connecting and for each call.
            client: Pre-built client, overriding the connection parameters.
        """
        self._host = host
        self._port = port
        self._redis: redis.Redis = client or redis.Redis(
            host=host,
            port=port,
            password=password or None,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self._default_ttl = default_ttl
        self._set_if_version = self._redis.register_script(SET_IF_VERSION)
        self._invalidate = self._redis.register_script(INVALIDATE)

    async def get(self, key: str) -> Optional[bytes]:
        """Retrieve cached value by key.

        Args:
            key: The cache key to retrieve.

        Returns:
            The cached value as bytes, or None if not found or expired.
        """
        try:
            return await self._redis.get(key)
        except (RedisError, OSError) as e:
            raise self._unavailable("GET", key, e) from e

    async def version(self, key: str) -> int:
        """Return the invalidation counter of a key, 0 if never invalidated."""
        try:
            raw = await self._redis.get(key + VERSION_SUFFIX)
        except (RedisError, OSError) as e:
            raise self._unavailable("GET", key + VERSION_SUFFIX, e) from e
        return int(raw or 0)

    async def set(
        self,
        key: str,
        value: bytes,
        ttl: Optional[timedelta] = None,
        *,
        version: Optional[int] = None,
    ) -> bool:
        """Store value with optional TTL.

        Args:
            key: The cache key.
            value: The value to store as bytes.
            ttl: Optional time-to-live. If None, uses default.
            version: Store only if the key's version still equals this.

        Returns:
            True if the value was stored.
        """
        seconds = int(ttl.total_seconds()) if ttl is not None else self._default_ttl
        try:
            if version is not None:
                stored = await self._set_if_version(
                    keys=[key + VERSION_SUFFIX, key],
                    args=[version, value, seconds or 0],
                )
                return bool(stored)
            if seconds:
                await self._redis.setex(key, seconds, value)
            else:
                await self._redis.set(key, value)
        except (RedisError, OSError) as e:
            raise self._unavailable("SET", key, e) from e
        return True

    async def invalidate(self, key: str) -> int:
        """Delete a key and increment its version.

        Returns:
            The new version.
        """
        try:
            return int(await self._invalidate(keys=[key + VERSION_SUFFIX, key]))
        except (RedisError, OSError) as e:
            raise self._unavailable("DEL", key, e) from e

    async def ping(self) -> bool:
        """Check the connection.

        Returns:
            True if Redis answered, False otherwise.
        """
        try:
            return bool(await self._redis.ping())
        except (RedisError, OSError) as e:
            logger.warning("Redis ping to %s:%s failed: %s", self._host, self._port, e)
            return False

    def _unavailable(self, command: str, key: str, error: Exception) -> TierUnavailable:
        return TierUnavailable(
            f"Redis {command} {key!r} on {self._host}:{self._port} failed: "
            f"{type(error).__name__}: {error}"
        )

    async def close(self) -> None:
        """Close the Redis connection."""
        await self._redis.aclose()

    async def __aenter__(self) -> "RedisCacheBackend":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: object) -> None:
        """Async context manager exit."""
        await self.close()
