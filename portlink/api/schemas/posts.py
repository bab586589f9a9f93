from pydantic import Field, field_validator
from datetime import datetime
from typing import Optional

from portlink.api.schemas.base import CamelModel
from portlink.models.enums import PostStatus, ProjectCategory, Profession
from portlink.services.trending import EngagementCounts


class AuthorSummary(CamelModel):
    id: int
    username: str
    name: Optional[str] = None
    profession: Optional[Profession] = None
    is_open_to_work: bool = False

    @classmethod
    def from_user(cls, user) -> "AuthorSummary":
        profile = user.profile
        return cls(
            id=user.id,
            username=user.username,
            name=profile.name if profile else None,
            profession=profile.profession if profile else None,
            is_open_to_work=bool(profile.is_open_to_work) if profile else False,
        )


class CountsResponse(CamelModel):
    likes: int = 0
    comments: int = 0
    bookmarks: int = 0


class PostResponse(CamelModel):
    id: int
    author_id: int
    author: Optional[AuthorSummary] = None
    title: str
    summary: Optional[str] = None
    content: str
    category: Optional[ProjectCategory] = None
    is_team_project: bool = False
    tech_stack: list[str] = []
    skills: list[str] = []
    status: PostStatus
    view_count: int = Field(0, ge=0)
    published_at: Optional[datetime] = None
    is_editor_pick: bool = False
    created_at: Optional[datetime] = None
    counts: CountsResponse = Field(default_factory=CountsResponse, alias="_count")

    @classmethod
    def from_row(cls, post, counts: Optional[EngagementCounts] = None) -> "PostResponse":
        counts = counts or EngagementCounts()
        return cls(
            id=post.id,
            author_id=post.author_id,
            author=AuthorSummary.from_user(post.author) if post.author else None,
            title=post.title,
            summary=post.summary,
            content=post.content,
            category=post.category,
            is_team_project=bool(post.is_team_project),
            tech_stack=post.tech_stack,
            skills=post.skills,
            status=post.status,
            view_count=post.view_count or 0,
            published_at=post.published_at,
            is_editor_pick=bool(post.is_editor_pick),
            created_at=post.created_at,
            counts=CountsResponse(
                likes=counts.likes,
                comments=counts.comments,
                bookmarks=counts.bookmarks,
            ),
        )


def _clean_tags(values: Optional[list[str]]) -> Optional[list[str]]:
    if values is None:
        return None
    return [v.strip() for v in values if v and v.strip()]


class PostCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    summary: Optional[str] = Field(None, max_length=500)
    content: str = Field(..., min_length=1)
    category: Optional[ProjectCategory] = None
    tech_stack: list[str] = []
    skills: list[str] = []
    is_team_project: bool = False
    status: PostStatus = PostStatus.DRAFT

    @field_validator("tech_stack", "skills")
    @classmethod
    def strip_tags(cls, values):
        return _clean_tags(values)


class PostUpdate(CamelModel):
    """Partial update: only fields present in the request body are applied"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    summary: Optional[str] = Field(None, max_length=500)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[ProjectCategory] = None
    tech_stack: Optional[list[str]] = None
    skills: Optional[list[str]] = None
    is_team_project: Optional[bool] = None
    status: Optional[PostStatus] = None

    @field_validator("tech_stack", "skills")
    @classmethod
    def strip_tags(cls, values):
        return _clean_tags(values)
