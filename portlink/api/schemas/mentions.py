from datetime import datetime
from typing import Optional

from portlink.api.schemas.base import CamelModel
from portlink.api.schemas.posts import AuthorSummary


class MentionedPost(CamelModel):
    id: int
    title: str


class MentionResponse(CamelModel):
    id: int
    author: Optional[AuthorSummary] = None
    post_id: Optional[int] = None
    comment_id: Optional[int] = None
    post: Optional[MentionedPost] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_mention(cls, mention) -> "MentionResponse":
        return cls(
            id=mention.id,
            author=AuthorSummary.from_user(mention.author) if mention.author else None,
            post_id=mention.post_id,
            comment_id=mention.comment_id,
            post=MentionedPost(id=mention.post.id, title=mention.post.title) if mention.post else None,
            created_at=mention.created_at,
        )


class MentionMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class MentionPage(CamelModel):
    data: list[MentionResponse]
    meta: MentionMeta


class UsernameCheckResponse(CamelModel):
    exists: bool
