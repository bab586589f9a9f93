import math
from datetime import datetime, timezone
from typing import Optional

from portlink.api.schemas.feed import FeedQuery, FeedResponse, Pagination, TagCount, SORT_OPTIONS
from portlink.api.schemas.posts import PostResponse
from portlink.cache.redis_client import RedisCache, CacheKeys
from portlink.config.settings import settings
from portlink.repositories.post_repository import PostRepository, FeedFilter, FeedOrder
from portlink.services.exceptions import InvalidSortError
from portlink.services.trending import TrendingScorer
from portlink.utils.logger import get_logger

logger = get_logger(__name__)


class FeedService:
    """
    Service layer for the public feed.
    Handles: filtering → ordering / trending ranking → pagination → caching.

    The cache is optional. With cache=None every call goes straight to the
    repository; results are identical, only slower.
    """

    EDITOR_PICKS_LIMIT = 5
    TRENDING_TAGS_LIMIT = 20

    def __init__(
        self,
        repository: PostRepository,
        cache: Optional[RedisCache] = None,
        scorer: Optional[TrendingScorer] = None,
    ):
        self.repository = repository
        self.cache = cache
        self.scorer = scorer or TrendingScorer()

    @staticmethod
    def is_cacheable(query: FeedQuery) -> bool:
        """
        Free-text search (unbounded key space) and the viewer-scoped
        isOpenToWork filter are never written to the shared cache.
        """
        return not query.search and not query.is_open_to_work

    @staticmethod
    def cache_key(query: FeedQuery) -> str:
        return CacheKeys.feed_page(
            sort_by=query.sort_by,
            page=query.page,
            limit=query.limit,
            tech_stack=query.tech_stack,
            skills=query.skills,
            category=query.category.value if query.category else None,
            profession=query.profession.value if query.profession else None,
            is_team_project=query.is_team_project,
        )

    async def get_feed(self, query: FeedQuery) -> FeedResponse:
        """
        Get one page of PUBLISHED posts.

        Args:
            query: page/limit/sort_by plus optional filters

        Returns:
            FeedResponse with posts and pagination (total counts every
            match for the predicate, whatever the sort mode)

        Raises:
            InvalidSortError: sort_by is not latest / popular / trending
        """
        if query.sort_by not in SORT_OPTIONS:
            raise InvalidSortError(query.sort_by, SORT_OPTIONS)

        search = query.search.strip() if query.search else None
        if search != query.search:
            query = query.model_copy(update={"search": search or None})

        cacheable = self.is_cacheable(query)
        cache_key = self.cache_key(query) if cacheable else None

        if cacheable and self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Feed cache hit: {cache_key}")
                return FeedResponse.model_validate(cached)

        filters = FeedFilter(
            tech_stack=list(query.tech_stack or []),
            skills=list(query.skills or []),
            category=query.category.value if query.category else None,
            profession=query.profession.value if query.profession else None,
            is_team_project=query.is_team_project,
            is_open_to_work=query.is_open_to_work,
            search=query.search,
        )

        total = await self.repository.count(filters)

        if query.sort_by == "trending":
            # Rank a bounded pool of the newest matches, then page through it.
            # Pages past the pool come back empty.
            pool = TrendingScorer.candidate_pool_size(query.limit)
            candidates = await self.repository.find_many(filters, FeedOrder.LATEST, skip=0, take=pool)
            ranked = self.scorer.rank(candidates, now=datetime.now(timezone.utc))
            rows = ranked[query.skip:query.skip + query.limit]
        else:
            rows = await self.repository.find_many(
                filters, FeedOrder(query.sort_by), skip=query.skip, take=query.limit
            )

        result = FeedResponse(
            posts=[PostResponse.from_row(post, counts) for post, counts in rows],
            pagination=Pagination(
                page=query.page,
                limit=query.limit,
                total=total,
                total_pages=math.ceil(total / query.limit),
            ),
        )

        if cacheable and self.cache is not None:
            await self.cache.set(
                cache_key,
                result.model_dump(mode="json", by_alias=True),
                ttl=settings.feed_cache_ttl,
            )

        return result

    async def get_editor_picks(self) -> list[PostResponse]:
        """Admin-curated posts, newest first, at most 5."""
        cache_key = CacheKeys.editor_picks()

        if self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                return [PostResponse.model_validate(item) for item in cached]

        picks = await self.compute_editor_picks()

        if self.cache is not None:
            await self.cache.set(
                cache_key,
                [post.model_dump(mode="json", by_alias=True) for post in picks],
                ttl=settings.editor_picks_cache_ttl,
            )

        return picks

    async def compute_editor_picks(self) -> list[PostResponse]:
        rows = await self.repository.find_editor_picks(limit=self.EDITOR_PICKS_LIMIT)
        return [PostResponse.from_row(post, counts) for post, counts in rows]

    async def get_trending_tags(self) -> list[TagCount]:
        """
        Most frequent tech-stack tags across PUBLISHED posts (top 20).

        Engagement plays no part here: a tag's count is the number of
        published posts carrying it.
        """
        cache_key = CacheKeys.trending_tags()

        if self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                return [TagCount.model_validate(item) for item in cached]

        tags = await self.compute_trending_tags()

        if self.cache is not None:
            await self.cache.set(
                cache_key,
                [tag.model_dump(mode="json") for tag in tags],
                ttl=settings.trending_tags_cache_ttl,
            )

        return tags

    async def compute_trending_tags(self) -> list[TagCount]:
        counts = await self.repository.tech_stack_counts(limit=self.TRENDING_TAGS_LIMIT)
        return [TagCount(tag=tag, count=count) for tag, count in counts]

    async def invalidate_feed_cache(self) -> None:
        """
        Drop every cached feed entry (feed:*).

        Called after any write that can change feed membership, ordering
        inputs or tag frequency.
        """
        if self.cache is None:
            return

        deleted = await self.cache.delete_pattern(CacheKeys.FEED_PATTERN)
        logger.info(f"Feed cache invalidated ({deleted} keys)")
