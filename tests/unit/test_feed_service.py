"""
Unit tests for FeedService with the repository and cache mocked.

Covers the caching contract (what is read, written and skipped), sort
validation, trending pool slicing and invalidation.
"""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from portlink.api.schemas.feed import FeedQuery, FeedResponse
from portlink.repositories.post_repository import FeedOrder
from portlink.services.exceptions import InvalidSortError
from portlink.services.feed_service import FeedService
from portlink.services.trending import EngagementCounts


def make_post(post_id: int, title: str = "Post", view_count: int = 0, hours_ago: float = 1):
    now = datetime.now(timezone.utc)
    return SimpleNamespace(
        id=post_id,
        author_id=1,
        author=None,
        title=f"{title} {post_id}",
        summary=None,
        content="content",
        category=None,
        is_team_project=False,
        tech_stack=["React"],
        skills=[],
        status="PUBLISHED",
        view_count=view_count,
        published_at=now - timedelta(hours=hours_ago),
        is_editor_pick=False,
        created_at=now - timedelta(hours=hours_ago),
    )


@pytest.fixture
def repository():
    repo = MagicMock()
    repo.count = AsyncMock(return_value=2)
    repo.find_many = AsyncMock(return_value=[
        (make_post(1, view_count=10), EngagementCounts()),
        (make_post(2, view_count=5), EngagementCounts()),
    ])
    repo.find_editor_picks = AsyncMock(return_value=[])
    repo.tech_stack_counts = AsyncMock(return_value=[("React", 3), ("Vue", 1)])
    return repo


@pytest.fixture
def cache():
    cache = MagicMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock(return_value=True)
    cache.delete_pattern = AsyncMock(return_value=4)
    return cache


class TestGetFeedCaching:
    @pytest.mark.asyncio
    async def test_cache_miss_queries_and_writes_with_feed_ttl(self, repository, cache):
        service = FeedService(repository, cache=cache)

        result = await service.get_feed(FeedQuery(sort_by="popular", limit=2))

        assert result.pagination.total == 2
        cache.get.assert_awaited_once_with("feed:popular:1:2:::::")
        key, payload = cache.set.await_args.args
        assert key == "feed:popular:1:2:::::"
        assert cache.set.await_args.kwargs["ttl"] == 300
        assert payload["pagination"]["totalPages"] == 1
        assert "_count" in payload["posts"][0]

    @pytest.mark.asyncio
    async def test_cache_hit_skips_repository(self, repository, cache):
        first = await FeedService(repository, cache=None).get_feed(FeedQuery())
        cache.get.return_value = first.model_dump(mode="json", by_alias=True)
        repository.count.reset_mock()
        repository.find_many.reset_mock()

        result = await FeedService(repository, cache=cache).get_feed(FeedQuery())

        assert isinstance(result, FeedResponse)
        assert result.pagination.total == first.pagination.total
        assert [p.id for p in result.posts] == [p.id for p in first.posts]
        repository.count.assert_not_awaited()
        repository.find_many.assert_not_awaited()
        cache.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_never_touches_cache(self, repository, cache):
        service = FeedService(repository, cache=cache)

        await service.get_feed(FeedQuery(search="react"))
        await service.get_feed(FeedQuery(search="react"))

        cache.get.assert_not_awaited()
        cache.set.assert_not_awaited()
        assert repository.count.await_count == 2
        assert repository.find_many.await_count == 2

    @pytest.mark.asyncio
    async def test_open_to_work_never_touches_cache(self, repository, cache):
        service = FeedService(repository, cache=cache)

        await service.get_feed(FeedQuery(is_open_to_work=True))

        cache.get.assert_not_awaited()
        cache.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_blank_search_is_cacheable(self, repository, cache):
        service = FeedService(repository, cache=cache)

        await service.get_feed(FeedQuery(search="   "))

        cache.set.assert_awaited_once()
        filters = repository.count.await_args.args[0]
        assert filters.search is None

    @pytest.mark.asyncio
    async def test_works_without_cache(self, repository):
        service = FeedService(repository, cache=None)

        result = await service.get_feed(FeedQuery())

        assert [p.id for p in result.posts] == [1, 2]

    @pytest.mark.asyncio
    async def test_cache_errors_propagate(self, repository, cache):
        cache.get.side_effect = ConnectionError("redis down")
        service = FeedService(repository, cache=cache)

        with pytest.raises(ConnectionError):
            await service.get_feed(FeedQuery())


class TestGetFeedQuerying:
    @pytest.mark.asyncio
    async def test_unknown_sort_is_rejected(self, repository, cache):
        service = FeedService(repository, cache=cache)

        with pytest.raises(InvalidSortError):
            await service.get_feed(FeedQuery(sort_by="random"))

        repository.count.assert_not_awaited()
        cache.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_sort_is_a_value_error(self, repository):
        with pytest.raises(ValueError):
            await FeedService(repository).get_feed(FeedQuery(sort_by="oldest"))

    @pytest.mark.asyncio
    async def test_latest_and_popular_page_in_the_database(self, repository):
        service = FeedService(repository)

        await service.get_feed(FeedQuery(sort_by="popular", page=3, limit=5))

        filters, order = repository.find_many.await_args.args
        assert order == FeedOrder.POPULAR
        assert repository.find_many.await_args.kwargs == {"skip": 10, "take": 5}

    @pytest.mark.asyncio
    async def test_trending_ranks_pool_then_slices(self, repository):
        pool = [
            (make_post(i, view_count=i * 10), EngagementCounts())
            for i in range(1, 8)
        ]
        repository.find_many.return_value = pool
        repository.count.return_value = 7
        service = FeedService(repository)

        result = await service.get_feed(FeedQuery(sort_by="trending", page=2, limit=3))

        _, order = repository.find_many.await_args.args
        assert order == FeedOrder.LATEST
        assert repository.find_many.await_args.kwargs == {"skip": 0, "take": 15}
        # Highest views first: 7,6,5 | 4,3,2 | 1
        assert [p.id for p in result.posts] == [4, 3, 2]
        assert result.pagination.total == 7
        assert result.pagination.total_pages == 3

    @pytest.mark.asyncio
    async def test_trending_page_past_pool_is_empty(self, repository):
        repository.find_many.return_value = [(make_post(1), EngagementCounts())]
        repository.count.return_value = 1
        service = FeedService(repository)

        result = await service.get_feed(FeedQuery(sort_by="trending", page=5, limit=10))

        assert result.posts == []
        assert result.pagination.total == 1

    @pytest.mark.asyncio
    async def test_total_pages_rounds_up(self, repository):
        repository.count.return_value = 21
        result = await FeedService(repository).get_feed(FeedQuery(limit=10))
        assert result.pagination.total_pages == 3

    @pytest.mark.asyncio
    async def test_filters_are_forwarded(self, repository):
        await FeedService(repository).get_feed(FeedQuery(
            tech_stack=["React"], skills=["Testing"], is_team_project=False,
        ))

        filters = repository.count.await_args.args[0]
        assert filters.tech_stack == ["React"]
        assert filters.skills == ["Testing"]
        assert filters.is_team_project is False


class TestSecondaryFeeds:
    @pytest.mark.asyncio
    async def test_trending_tags_cached_for_thirty_minutes(self, repository, cache):
        tags = await FeedService(repository, cache=cache).get_trending_tags()

        assert [(t.tag, t.count) for t in tags] == [("React", 3), ("Vue", 1)]
        key, payload = cache.set.await_args.args
        assert key == "feed:trending-tags"
        assert payload == [{"tag": "React", "count": 3}, {"tag": "Vue", "count": 1}]
        assert cache.set.await_args.kwargs["ttl"] == 1800

    @pytest.mark.asyncio
    async def test_trending_tags_cache_hit(self, repository, cache):
        cache.get.return_value = [{"tag": "Go", "count": 9}]

        tags = await FeedService(repository, cache=cache).get_trending_tags()

        assert tags[0].tag == "Go"
        repository.tech_stack_counts.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_editor_picks_cached_for_ten_minutes(self, repository, cache):
        repository.find_editor_picks.return_value = [(make_post(9), EngagementCounts(likes=1))]

        picks = await FeedService(repository, cache=cache).get_editor_picks()

        assert [p.id for p in picks] == [9]
        repository.find_editor_picks.assert_awaited_once_with(limit=5)
        assert cache.set.await_args.args[0] == "feed:editor-picks"
        assert cache.set.await_args.kwargs["ttl"] == 600


class TestInvalidation:
    @pytest.mark.asyncio
    async def test_deletes_feed_namespace(self, repository, cache):
        await FeedService(repository, cache=cache).invalidate_feed_cache()
        cache.delete_pattern.assert_awaited_once_with("feed:*")

    @pytest.mark.asyncio
    async def test_no_cache_is_a_no_op(self, repository):
        await FeedService(repository, cache=None).invalidate_feed_cache()
