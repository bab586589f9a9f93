"""
Unit tests for the Redis cache layer (client mocked with AsyncMock).

Tests:
1. Feed key derivation (deterministic, order-insensitive, bool-aware)
2. get/set JSON round trip and TTL
3. delete_pattern via SCAN
4. Error propagation and the disconnected no-op path
"""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from portlink.cache.redis_client import RedisCache, CacheKeys


def _scan_iter(keys):
    async def scan_iter(match=None, count=None):
        for key in keys:
            yield key
    return scan_iter


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.setex = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=0)
    client.aclose = AsyncMock()
    return client


class TestCacheKeys:
    def test_default_feed_key(self):
        key = CacheKeys.feed_page(sort_by="latest", page=1, limit=10)
        assert key == "feed:latest:1:10:::::"

    def test_filter_order_does_not_split_key(self):
        a = CacheKeys.feed_page("popular", 2, 20, tech_stack=["Vue", "React"], skills=["UX", "API"])
        b = CacheKeys.feed_page("popular", 2, 20, tech_stack=["React", "Vue"], skills=["API", "UX"])
        assert a == b
        assert a == "feed:popular:2:20:React,Vue:API,UX:::"

    def test_separator_inside_tag_does_not_collide(self):
        one_tag = CacheKeys.feed_page("latest", 1, 10, tech_stack=["React,Vue"])
        two_tags = CacheKeys.feed_page("latest", 1, 10, tech_stack=["React", "Vue"])
        colon = CacheKeys.feed_page("latest", 1, 10, tech_stack=["a:b"])

        assert one_tag != two_tags
        assert one_tag == "feed:latest:1:10:React%2CVue::::"
        assert colon.count(":") == two_tags.count(":")

    def test_team_project_flag_is_three_valued(self):
        unset = CacheKeys.feed_page("latest", 1, 10, is_team_project=None)
        true = CacheKeys.feed_page("latest", 1, 10, is_team_project=True)
        false = CacheKeys.feed_page("latest", 1, 10, is_team_project=False)
        assert len({unset, true, false}) == 3
        assert false.endswith(":false")

    def test_category_and_profession_in_key(self):
        key = CacheKeys.feed_page("trending", 1, 10, category="WEB", profession="DEVELOPER")
        assert key == "feed:trending:1:10:::WEB:DEVELOPER:"

    def test_every_key_is_under_feed_namespace(self):
        assert CacheKeys.editor_picks().startswith("feed:")
        assert CacheKeys.trending_tags().startswith("feed:")
        assert CacheKeys.FEED_PATTERN == "feed:*"


class TestRedisCache:
    @pytest.mark.asyncio
    async def test_get_miss_returns_none(self, redis_client):
        cache = RedisCache(client=redis_client)
        assert await cache.get("feed:x") is None
        redis_client.get.assert_awaited_once_with("feed:x")

    @pytest.mark.asyncio
    async def test_get_decodes_json(self, redis_client):
        redis_client.get.return_value = json.dumps({"posts": [], "pagination": {"total": 3}})
        cache = RedisCache(client=redis_client)

        value = await cache.get("feed:x")

        assert value == {"posts": [], "pagination": {"total": 3}}

    @pytest.mark.asyncio
    async def test_set_uses_setex_with_ttl(self, redis_client):
        cache = RedisCache(client=redis_client)

        assert await cache.set("feed:x", {"a": 1}, ttl=300) is True

        redis_client.setex.assert_awaited_once_with("feed:x", 300, json.dumps({"a": 1}))

    @pytest.mark.asyncio
    async def test_delete_pattern_scans_and_deletes(self, redis_client):
        redis_client.scan_iter = _scan_iter(["feed:latest:1:10:::::", "feed:editor-picks"])
        redis_client.delete.return_value = 2
        cache = RedisCache(client=redis_client)

        deleted = await cache.delete_pattern("feed:*")

        assert deleted == 2
        redis_client.delete.assert_awaited_once_with("feed:latest:1:10:::::", "feed:editor-picks")

    @pytest.mark.asyncio
    async def test_delete_pattern_without_matches(self, redis_client):
        redis_client.scan_iter = _scan_iter([])
        cache = RedisCache(client=redis_client)

        assert await cache.delete_pattern("feed:*") == 0
        redis_client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_command_errors_propagate(self, redis_client):
        redis_client.get.side_effect = ConnectionError("redis down")
        cache = RedisCache(client=redis_client)

        with pytest.raises(ConnectionError):
            await cache.get("feed:x")

    @pytest.mark.asyncio
    async def test_disconnected_cache_is_a_no_op(self):
        cache = RedisCache(url="redis://localhost:1/0")

        assert cache.is_connected is False
        assert cache.client is None
        assert await cache.get("feed:x") is None
        assert await cache.set("feed:x", {"a": 1}) is False
        assert await cache.delete_pattern("feed:*") == 0

    @pytest.mark.asyncio
    async def test_disconnect_closes_client(self, redis_client):
        cache = RedisCache(client=redis_client)

        await cache.disconnect()

        redis_client.aclose.assert_awaited_once()
        assert cache.is_connected is False
