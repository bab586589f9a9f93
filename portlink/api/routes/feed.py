from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from portlink.api.dependencies import get_feed_service
from portlink.api.middleware.rate_limit import check_rate_limit
from portlink.api.schemas.feed import FeedQuery, FeedResponse, TagCount
from portlink.api.schemas.posts import PostResponse
from portlink.config.rate_limits import RATE_LIMITS, get_period_seconds
from portlink.config.settings import settings
from portlink.models.enums import ProjectCategory, Profession
from portlink.services.feed_service import FeedService

router = APIRouter(prefix="/feed", tags=["feed"])


# ═══════════════════════════════════════════════════════════════════════════════
# RATE LIMIT DEPENDENCY FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════════


async def rate_limit_feed_list(request: Request):
    """
    Rate limit: GET /feed

    Filter-only queries are answered from the cache; search and
    isOpenToWork queries always hit the DB.

    Endpoint cost: 🟢 LOW (mostly cached)
    """
    config = RATE_LIMITS["feed:list"]
    return await check_rate_limit(
        request=request,
        endpoint_key="feed:list",
        limit=config.requests,
        period_seconds=get_period_seconds(config.period)
    )


async def rate_limit_feed_editor_picks(request: Request):
    """Rate limit: GET /feed/editor-picks. Endpoint cost: 🟢 LOW (cached 10 min)"""
    config = RATE_LIMITS["feed:editor_picks"]
    return await check_rate_limit(
        request=request,
        endpoint_key="feed:editor_picks",
        limit=config.requests,
        period_seconds=get_period_seconds(config.period)
    )


async def rate_limit_feed_trending_tags(request: Request):
    """
    Rate limit: GET /feed/trending-tags

    On a cache miss this is a GROUP BY over every published tag row.

    Endpoint cost: 🟡 MEDIUM (aggregation, cached 30 min)
    """
    config = RATE_LIMITS["feed:trending_tags"]
    return await check_rate_limit(
        request=request,
        endpoint_key="feed:trending_tags",
        limit=config.requests,
        period_seconds=get_period_seconds(config.period)
    )


# ═══════════════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════════


@router.get("", response_model=FeedResponse, response_model_by_alias=True)
async def get_feed(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.feed_default_limit, ge=1, description=f"clamped to {settings.feed_max_limit}"),
    sort_by: str = Query("latest", alias="sortBy", description="latest | popular | trending"),
    tech_stack: Optional[list[str]] = Query(None, alias="techStack"),
    skills: Optional[list[str]] = Query(None),
    category: Optional[ProjectCategory] = Query(None),
    profession: Optional[Profession] = Query(None),
    is_team_project: Optional[bool] = Query(None, alias="isTeamProject"),
    is_open_to_work: Optional[bool] = Query(None, alias="isOpenToWork"),
    search: Optional[str] = Query(None, max_length=200),
    feed_service: FeedService = Depends(get_feed_service),
    _rate_limit: dict = Depends(rate_limit_feed_list),
):
    """
    Paginated feed of published posts.

    `total` counts every post matching the filters; `trending` re-ranks a
    pool of the newest matches by engagement and recency.
    """
    query = FeedQuery(
        page=page,
        limit=limit,
        sort_by=sort_by,
        tech_stack=tech_stack,
        skills=skills,
        category=category,
        profession=profession,
        is_team_project=is_team_project,
        is_open_to_work=is_open_to_work,
        search=search,
    )
    return await feed_service.get_feed(query)


@router.get("/editor-picks", response_model=list[PostResponse], response_model_by_alias=True)
async def get_editor_picks(
    feed_service: FeedService = Depends(get_feed_service),
    _rate_limit: dict = Depends(rate_limit_feed_editor_picks),
):
    return await feed_service.get_editor_picks()


@router.get("/trending-tags", response_model=list[TagCount])
async def get_trending_tags(
    feed_service: FeedService = Depends(get_feed_service),
    _rate_limit: dict = Depends(rate_limit_feed_trending_tags),
):
    """Most-used tech tags across published posts (top 20)"""
    return await feed_service.get_trending_tags()
