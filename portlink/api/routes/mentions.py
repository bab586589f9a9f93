from fastapi import APIRouter, Depends, Query

from portlink.api.dependencies import get_mention_service, get_current_user_id
from portlink.api.middleware.rate_limit import rate_limit
from portlink.api.schemas.mentions import MentionPage, MentionResponse, UsernameCheckResponse
from portlink.api.schemas.posts import AuthorSummary
from portlink.services.mention_service import MentionService

router = APIRouter(prefix="/mentions", tags=["mentions"])


@router.get("/me", response_model=MentionPage)
async def my_mentions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    mentions: MentionService = Depends(get_mention_service),
):
    result = await mentions.list_for_user(user_id, page=page, limit=limit)
    return {
        "data": [MentionResponse.from_mention(m) for m in result["data"]],
        "meta": result["meta"],
    }


@router.get(
    "/search",
    response_model=list[AuthorSummary],
    dependencies=[Depends(rate_limit("mentions:search"))],
)
async def search_usernames(
    q: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=50),
    mentions: MentionService = Depends(get_mention_service),
):
    """Autocomplete for @mentions"""
    return [AuthorSummary.from_user(u) for u in await mentions.search_users(q, limit=limit)]


@router.get("/check-username", response_model=UsernameCheckResponse)
async def check_username(
    username: str = Query(..., min_length=1),
    mentions: MentionService = Depends(get_mention_service),
):
    return {"exists": await mentions.username_exists(username)}
