from datetime import datetime
from typing import Optional

from pydantic import Field

from portlink.api.schemas.base import CamelModel
from portlink.api.schemas.posts import AuthorSummary, PostResponse


class LikeToggleResponse(CamelModel):
    liked: bool
    message: str


class LikeStatusResponse(CamelModel):
    liked: bool


class LikerSummary(CamelModel):
    id: int
    username: str
    name: Optional[str] = None


class PostLikesResponse(CamelModel):
    count: int
    users: list[LikerSummary]


class BookmarkToggleResponse(CamelModel):
    bookmarked: bool
    message: str


class BookmarkStatusResponse(CamelModel):
    bookmarked: bool


class BookmarkResponse(CamelModel):
    id: int
    created_at: Optional[datetime] = None
    post: PostResponse

    @classmethod
    def from_bookmark(cls, bookmark) -> "BookmarkResponse":
        return cls(
            id=bookmark.id,
            created_at=bookmark.created_at,
            post=PostResponse.from_row(bookmark.post),
        )


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentUpdate(CamelModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(CamelModel):
    id: int
    post_id: int
    author_id: int
    author: Optional[AuthorSummary] = None
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_comment(cls, comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            author_id=comment.author_id,
            author=AuthorSummary.from_user(comment.author) if comment.author else None,
            content=comment.content,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )
