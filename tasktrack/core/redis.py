"""
Redis client for the statistics cache
Uses Upstash Redis REST API so multiple API instances share one cache
Reference: https://upstash.com/docs/redis/overall/getstarted
"""
import httpx
import logging
from typing import Optional
from functools import lru_cache

from tasktrack.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_redis_client() -> Optional['RedisClient']:
    """
    Get a singleton RedisClient instance.

    Returns None if Redis is not configured (caller falls back to in-memory cache).

    Reference: https://docs.python.org/3/library/functools.html#functools.lru_cache
    """
    if not settings.UPSTASH_REDIS_REST_URL or not settings.UPSTASH_REDIS_REST_TOKEN:
        logger.warning("Redis not configured - statistics cache will use in-memory storage (not shared between instances)")
        return None
    return RedisClient(settings.UPSTASH_REDIS_REST_URL, settings.UPSTASH_REDIS_REST_TOKEN)


class RedisClient:
    """
    Redis client using Upstash REST API.

    Uses HTTP requests to interact with Upstash Redis, making it suitable
    for serverless environments where persistent connections aren't available.

    Every method logs and swallows transport errors: a cache outage degrades
    to recomputation, it never fails the caller.

    Reference: https://upstash.com/docs/redis/overall/getstarted
    """

    def __init__(
        self,
        url: str,
        token: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not url or not token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")

        self.base_url = url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    async def setex(self, key: str, seconds: int, value: str) -> bool:
        """
        Set a key with expiration time.

        Upstash REST API format: POST /setex/{key}/{seconds} with value in body

        Args:
            key: Redis key
            seconds: Expiration time in seconds
            value: Value to store

        Returns:
            True if successful, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/setex/{key}/{seconds}",
                    headers=self._headers(),
                    content=value,  # Send value as plain text in body
                )
                response.raise_for_status()
                result = response.json()
                # Upstash returns {"result": "OK"} on success
                return result.get("result") == "OK"
        except Exception as e:
            logger.error(f"Failed to set Redis key {key}: {type(e).__name__}: {e}", exc_info=True)
            return False

    async def get(self, key: str) -> Optional[str]:
        """
        Get a value by key.

        Args:
            key: Redis key

        Returns:
            Value if found, None otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    f"{self.base_url}/get/{key}",
                    headers=self._headers(),
                )
                response.raise_for_status()
                result = response.json()
                # Upstash REST API returns {"result": "value"} or {"result": null}
                return result.get("result") if result else None
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            logger.error(f"Failed to get Redis key {key}: {e}", exc_info=True)
            return None
        except Exception as e:
            logger.error(f"Failed to get Redis key {key}: {type(e).__name__}: {e}", exc_info=True)
            return None

    async def delete(self, key: str) -> bool:
        """
        Delete a key.

        Upstash REST API format: POST /del/{key}

        Args:
            key: Redis key

        Returns:
            True if a key was removed, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/del/{key}",
                    headers=self._headers(),
                )
                response.raise_for_status()
                result = response.json()
                # Upstash returns {"result": 1} if deleted, {"result": 0} if not found
                return result.get("result", 0) >= 1
        except Exception as e:
            logger.error(f"Failed to delete Redis key {key}: {type(e).__name__}: {e}", exc_info=True)
            return False
