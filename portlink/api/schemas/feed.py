from pydantic import Field, field_validator
from typing import Optional

from portlink.api.schemas.base import CamelModel
from portlink.api.schemas.posts import PostResponse
from portlink.config.settings import settings
from portlink.models.enums import ProjectCategory, Profession

SORT_OPTIONS = ("latest", "popular", "trending")


class FeedQuery(CamelModel):
    """Parameters for one feed page (all filters optional)."""
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)
    sort_by: str = "latest"
    tech_stack: Optional[list[str]] = None
    skills: Optional[list[str]] = None
    category: Optional[ProjectCategory] = None
    profession: Optional[Profession] = None
    is_team_project: Optional[bool] = None
    is_open_to_work: Optional[bool] = None
    search: Optional[str] = None

    @field_validator("limit")
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        return min(v, settings.feed_max_limit)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(CamelModel):
    page: int
    limit: int
    total: int = Field(..., ge=0)  # matches for the predicate, not just this page
    total_pages: int = Field(..., ge=0)


class FeedResponse(CamelModel):
    posts: list[PostResponse]
    pagination: Pagination


class TagCount(CamelModel):
    tag: str
    count: int = Field(..., ge=1)
