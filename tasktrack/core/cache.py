"""
Cache collaborators for the statistics aggregator

Values are strings (JSON documents) so every backend stores the same payload.
Reference: https://upstash.com/docs/redis/overall/getstarted
"""
import logging
import time
from functools import lru_cache
from typing import Callable, Optional, Protocol

from tasktrack.core.config import settings
from tasktrack.core.redis import RedisClient, get_redis_client

logger = logging.getLogger(__name__)


class Cache(Protocol):
    """Key/value store with per-key expiry."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemoryCache:
    """
    Process-local cache

    Structure: {key: (value, expiry_timestamp)}
    Expired entries are dropped lazily on read.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._entries: dict[str, tuple[str, float]] = {}
        self._clock = clock

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expiry = entry
        if self._clock() >= expiry:
            # Cache expired, remove it
            self._entries.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._clock() < entry[1]


class RedisCache:
    """Cache backed by Upstash Redis (REST)"""

    def __init__(self, client: RedisClient):
        self._client = client

    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        stored = await self._client.setex(key, ttl_seconds, value)
        if not stored:
            logger.warning(f"Redis did not store cache key {key}")

    async def delete(self, key: str) -> None:
        await self._client.delete(key)


@lru_cache()
def get_cache() -> Cache:
    """
    Get the process-wide cache selected by CACHE_BACKEND.

    Falls back to the in-memory cache when Redis is requested but not configured.
    """
    if settings.CACHE_BACKEND == "redis":
        client = get_redis_client()
        if client is not None:
            return RedisCache(client)
    return InMemoryCache()
