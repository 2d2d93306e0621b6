"""Redis store for distributed locks.

Handles:
- Distributed locks (prevent thundering herd on category refresh)

TTL policies:
- Refresh lock: 30-300 seconds (long enough to cover a provider round trip)
"""

import logging

import redis.asyncio as redis

from wordapi.settings import Settings

TTL_REFRESH_LOCK = 120  # 2 minutes

# Key prefixes
PREFIX_LOCK = "lock:"

logger = logging.getLogger("uvicorn.error")


class RedisLocks:
    """SET NX EX locks on a lazily-connected Redis client."""

    def __init__(self, url: str):
        self.url = url
        self._redis: redis.Redis | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisLocks":
        return cls(settings.redis_url)

    async def init(self) -> None:
        """Initialize Redis connection."""
        if self._redis is not None:
            return
        client = redis.from_url(
            self.url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        try:
            # Validate connectivity early (especially for `rediss://` in production).
            await client.ping()
        except Exception:
            await client.aclose()
            raise
        self._redis = client
        logger.info("Redis connected")

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def _get_redis(self) -> redis.Redis:
        if self._redis is None:
            await self.init()
        if self._redis is None:
            raise RuntimeError("Redis not initialized")
        return self._redis

    async def acquire_lock(self, key: str, ttl: int = TTL_REFRESH_LOCK) -> bool:
        """Acquire a distributed lock.

        Args:
            key: Lock key (e.g., "categories:refresh").
            ttl: Lock timeout in seconds.

        Returns:
            True if lock acquired, False if already locked.
        """
        client = await self._get_redis()
        # SET NX (only if not exists) with TTL
        result = await client.set(f"{PREFIX_LOCK}{key}", "1", nx=True, ex=ttl)
        return bool(result)

    async def release_lock(self, key: str) -> None:
        """Release a distributed lock.

        Args:
            key: Lock key.
        """
        client = await self._get_redis()
        await client.delete(f"{PREFIX_LOCK}{key}")
