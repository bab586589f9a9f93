from typing import Optional

from fastapi import APIRouter, Depends, status

from portlink.api.dependencies import get_post_service, get_current_user_id, get_optional_user_id
from portlink.api.middleware.rate_limit import rate_limit
from portlink.api.schemas.posts import PostCreate, PostUpdate, PostResponse
from portlink.services.post_service import PostService

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("posts:write"))],
)
async def create_post(
    data: PostCreate,
    user_id: int = Depends(get_current_user_id),
    posts: PostService = Depends(get_post_service),
):
    """Create a post (DRAFT unless status=PUBLISHED is sent)"""
    return await posts.create(user_id, data)


@router.get(
    "/author/{author_id}",
    response_model=list[PostResponse],
    dependencies=[Depends(rate_limit("posts:read"))],
)
async def list_posts_by_author(
    author_id: int,
    viewer_id: Optional[int] = Depends(get_optional_user_id),
    posts: PostService = Depends(get_post_service),
):
    """Author sees drafts and hidden posts too; everyone else only published ones"""
    return await posts.list_by_author(author_id, viewer_id)


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    dependencies=[Depends(rate_limit("posts:read"))],
)
async def get_post(
    post_id: int,
    viewer_id: Optional[int] = Depends(get_optional_user_id),
    posts: PostService = Depends(get_post_service),
):
    """Single post. Every call counts one view."""
    return await posts.find_one(post_id, viewer_id)


@router.patch(
    "/{post_id}",
    response_model=PostResponse,
    dependencies=[Depends(rate_limit("posts:write"))],
)
async def update_post(
    post_id: int,
    data: PostUpdate,
    user_id: int = Depends(get_current_user_id),
    posts: PostService = Depends(get_post_service),
):
    return await posts.update(post_id, user_id, data)


@router.post(
    "/{post_id}/publish",
    response_model=PostResponse,
    dependencies=[Depends(rate_limit("posts:write"))],
)
async def publish_post(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    posts: PostService = Depends(get_post_service),
):
    return await posts.publish(post_id, user_id)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(rate_limit("posts:write"))],
)
async def delete_post(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    posts: PostService = Depends(get_post_service),
):
    await posts.delete(post_id, user_id)
