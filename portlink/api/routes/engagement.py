from fastapi import APIRouter, Depends, status

from portlink.api.dependencies import get_engagement_service, get_current_user_id
from portlink.api.middleware.rate_limit import rate_limit
from portlink.api.schemas.engagement import (
    LikeToggleResponse, LikeStatusResponse, PostLikesResponse,
    BookmarkToggleResponse, BookmarkStatusResponse, BookmarkResponse,
    CommentCreate, CommentUpdate, CommentResponse,
)
from portlink.services.engagement_service import EngagementService

router = APIRouter(tags=["engagement"])


# ─────────────────────────────────────────────────────────────────
# Likes
# ─────────────────────────────────────────────────────────────────

@router.post(
    "/posts/{post_id}/like",
    response_model=LikeToggleResponse,
    dependencies=[Depends(rate_limit("engagement:toggle"))],
)
async def toggle_like(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    engagement: EngagementService = Depends(get_engagement_service),
):
    return await engagement.toggle_like(post_id, user_id)


@router.get("/posts/{post_id}/like", response_model=LikeStatusResponse)
async def like_status(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    engagement: EngagementService = Depends(get_engagement_service),
):
    return await engagement.like_status(post_id, user_id)


@router.get(
    "/posts/{post_id}/likes",
    response_model=PostLikesResponse,
    dependencies=[Depends(rate_limit("default:read"))],
)
async def post_likes(
    post_id: int,
    engagement: EngagementService = Depends(get_engagement_service),
):
    return await engagement.post_likes(post_id)


# ─────────────────────────────────────────────────────────────────
# Bookmarks
# ─────────────────────────────────────────────────────────────────

@router.post(
    "/posts/{post_id}/bookmark",
    response_model=BookmarkToggleResponse,
    dependencies=[Depends(rate_limit("engagement:toggle"))],
)
async def toggle_bookmark(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    engagement: EngagementService = Depends(get_engagement_service),
):
    return await engagement.toggle_bookmark(post_id, user_id)


@router.get("/posts/{post_id}/bookmark", response_model=BookmarkStatusResponse)
async def bookmark_status(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    engagement: EngagementService = Depends(get_engagement_service),
):
    return await engagement.bookmark_status(post_id, user_id)


@router.get("/bookmarks", response_model=list[BookmarkResponse])
async def list_bookmarks(
    user_id: int = Depends(get_current_user_id),
    engagement: EngagementService = Depends(get_engagement_service),
):
    """Caller's bookmarks, newest first"""
    bookmarks = await engagement.list_user_bookmarks(user_id)
    return [BookmarkResponse.from_bookmark(bookmark) for bookmark in bookmarks]


# ─────────────────────────────────────────────────────────────────
# Comments
# ─────────────────────────────────────────────────────────────────

@router.get(
    "/posts/{post_id}/comments",
    response_model=list[CommentResponse],
    dependencies=[Depends(rate_limit("default:read"))],
)
async def list_comments(
    post_id: int,
    engagement: EngagementService = Depends(get_engagement_service),
):
    comments = await engagement.list_comments(post_id)
    return [CommentResponse.from_comment(comment) for comment in comments]


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("comments:write"))],
)
async def add_comment(
    post_id: int,
    data: CommentCreate,
    user_id: int = Depends(get_current_user_id),
    engagement: EngagementService = Depends(get_engagement_service),
):
    comment = await engagement.add_comment(post_id, user_id, data.content)
    return CommentResponse.from_comment(comment)


@router.patch(
    "/comments/{comment_id}",
    response_model=CommentResponse,
    dependencies=[Depends(rate_limit("comments:write"))],
)
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    user_id: int = Depends(get_current_user_id),
    engagement: EngagementService = Depends(get_engagement_service),
):
    comment = await engagement.update_comment(comment_id, user_id, data.content)
    return CommentResponse.from_comment(comment)


@router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(rate_limit("comments:write"))],
)
async def delete_comment(
    comment_id: int,
    user_id: int = Depends(get_current_user_id),
    engagement: EngagementService = Depends(get_engagement_service),
):
    await engagement.delete_comment(comment_id, user_id)
