"""TTL caches for analysis results.

Both backends store strings; callers serialize (pydantic JSON). Construct
one instance at startup and inject it where needed.
"""

import time
from typing import Protocol

from loguru import logger
from redis.asyncio import Redis
from redis.exceptions import RedisError


class AnalysisCache(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: int) -> None: ...

    async def delete(self, key: str) -> None: ...


class MemoryCache:
    """Process-local TTL cache. Expired entries are dropped lazily on read
    and swept every ``sweep_every`` writes."""

    def __init__(self, sweep_every: int = 100) -> None:
        self._entries: dict[str, tuple[float, str]] = {}
        self._sweep_every = sweep_every
        self._writes = 0

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if time.monotonic() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._entries[key] = (time.monotonic() + ttl, value)
        self._writes += 1
        if self._writes % self._sweep_every == 0:
            self._sweep()

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def _sweep(self) -> None:
        now = time.monotonic()
        expired = [k for k, (exp, _) in self._entries.items() if exp <= now]
        for k in expired:
            del self._entries[k]


class RedisCache:
    """Redis-backed cache. Redis outages degrade to cache misses."""

    def __init__(self, redis: Redis, prefix: str = "analytics:") -> None:
        self._redis = redis
        self._prefix = prefix

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(self._prefix + key)
        except RedisError as e:
            logger.warning(f"[CACHE] Redis get failed for {key}: {e}")
            return None

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            await self._redis.set(self._prefix + key, value, ex=ttl)
        except RedisError as e:
            logger.warning(f"[CACHE] Redis set failed for {key}: {e}")

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(self._prefix + key)
        except RedisError as e:
            logger.warning(f"[CACHE] Redis delete failed for {key}: {e}")


async def create_cache(backend: str) -> AnalysisCache:
    """Build the configured cache backend."""
    if backend == "redis":
        from src.db.redis import get_redis

        logger.info("[CACHE] Using Redis analysis cache")
        return RedisCache(await get_redis())
    logger.info("[CACHE] Using in-memory analysis cache")
    return MemoryCache()
