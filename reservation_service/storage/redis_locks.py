"""Redis-based distributed locks for background jobs."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import redis.asyncio as redis


class RedisLockHelper:
    """Helper for Redis-based distributed locking."""

    def __init__(self, redis_url: str, ttl_seconds: int = 300, key_prefix: str = "rsv:lock"):
        """Initialize Redis lock helper."""
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        self._client = redis.from_url(self.redis_url, encoding="utf-8")

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @asynccontextmanager
    async def acquire_lock(self, name: str) -> AsyncGenerator[bool, None]:
        """Try to take an exclusive named lock; yields whether it was acquired."""
        if not self._client:
            raise RuntimeError("Redis client not connected")

        lock_key = f"{self.key_prefix}:{name}"
        acquired = False

        try:
            # SET NX so only one holder exists until release or TTL expiry
            acquired = await self._client.set(
                lock_key, "1", ex=self.ttl_seconds, nx=True
            )
            yield bool(acquired)
        finally:
            if acquired:
                await self._client.delete(lock_key)
