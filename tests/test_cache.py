"""
Redis-backed statistics cache over the Upstash REST API
"""
import httpx
import pytest

from tasktrack.core.cache import RedisCache
from tasktrack.core.redis import RedisClient


def upstash(store: dict):
    """Mock Upstash endpoint backed by a dict"""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer secret"
        command, key, *rest = request.url.path.strip("/").split("/")
        if command == "setex":
            store[key] = (request.content.decode(), int(rest[0]))
            return httpx.Response(200, json={"result": "OK"})
        if command == "get":
            entry = store.get(key)
            return httpx.Response(200, json={"result": entry[0] if entry else None})
        if command == "del":
            return httpx.Response(200, json={"result": 1 if store.pop(key, None) else 0})
        return httpx.Response(400, json={"error": "unknown command"})

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_round_trip_through_rest_api():
    store = {}
    cache = RedisCache(RedisClient("https://redis.test/", "secret", transport=upstash(store)))

    await cache.set("task_statistics_by_user:5", "[]", ttl_seconds=600)
    assert store["task_statistics_by_user:5"] == ("[]", 600)
    assert await cache.get("task_statistics_by_user:5") == "[]"

    await cache.delete("task_statistics_by_user:5")
    assert await cache.get("task_statistics_by_user:5") is None


@pytest.mark.asyncio
async def test_server_errors_degrade_to_cache_miss():
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    client = RedisClient("https://redis.test", "secret", transport=transport)

    assert await client.get("k") is None
    assert await client.setex("k", 10, "v") is False
    assert await client.delete("k") is False
