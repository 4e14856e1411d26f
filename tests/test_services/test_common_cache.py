"""
通用缓存测试
"""

import json
import pytest
from unittest.mock import AsyncMock

from educonnect.services.common_cache import SimpleCache


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.get.return_value = None
    client.setex.return_value = True
    client.delete.return_value = 1
    return client


@pytest.mark.asyncio
class TestSimpleCache:

    async def test_set_uses_prefix_and_ttl(self, redis_client):
        cache = SimpleCache(redis_client, key_prefix="course:")

        assert await cache.set("detail:c1", {"title": "Algèbre"}, ttl=60)

        key, ttl, data = redis_client.setex.call_args[0]
        assert key == "course:detail:c1"
        assert ttl == 60
        assert json.loads(data) == {"title": "Algèbre"}

    async def test_get_decodes_json(self, redis_client):
        redis_client.get.return_value = json.dumps({"title": "Algèbre"})
        cache = SimpleCache(redis_client, key_prefix="course:")

        assert await cache.get("detail:c1") == {"title": "Algèbre"}
        redis_client.get.assert_called_once_with("course:detail:c1")

    async def test_errors_degrade_to_miss(self, redis_client):
        redis_client.get.side_effect = ConnectionError("redis down")
        redis_client.delete.side_effect = ConnectionError("redis down")
        cache = SimpleCache(redis_client)

        assert await cache.get("k") is None
        assert await cache.delete("k") is False

    async def test_without_client_nothing_is_cached(self):
        cache = SimpleCache(key_prefix="course:")

        assert await cache.get("k") is None
        assert await cache.set("k", 1) is False
        assert await cache.delete("k") is False
        assert await cache.delete_pattern("*") == 0
