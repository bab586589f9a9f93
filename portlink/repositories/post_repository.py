"""
Read-side persistence for the feed.

Everything the ranking service needs from storage goes through
PostRepository: a count and a paged fetch over the same predicate, with
per-row like/comment/bookmark counts computed in the same SELECT
(correlated COUNT subqueries) so a page never costs N+1 queries.

Author, profile and tags hydrate through selectin loaders: one extra
IN-query per relationship per page, regardless of page size.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Tuple

from sqlalchemy import select, func, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.models.engagement import Like, Bookmark, Comment
from portlink.models.enums import PostStatus, TagKind
from portlink.models.post import Post, PostTag
from portlink.models.user import User, Profile
from portlink.services.trending import EngagementCounts


class FeedOrder(str, Enum):
    LATEST = "latest"
    POPULAR = "popular"


@dataclass
class FeedFilter:
    """
    Predicate inputs for a feed query. Only PUBLISHED posts ever match.

    tech_stack / skills use OR semantics: a post matches when it carries
    at least one of the requested tags.
    """
    tech_stack: List[str] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)
    category: Optional[str] = None
    profession: Optional[str] = None
    is_team_project: Optional[bool] = None
    is_open_to_work: Optional[bool] = None
    search: Optional[str] = None


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _count_subquery(model, label: str):
    return (
        select(func.count(model.id))
        .where(model.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
        .label(label)
    )


def _has_any_tag(kind: TagKind, names: List[str]):
    return Post.tags.any(and_(PostTag.kind == kind.value, PostTag.name.in_(names)))


def build_conditions(filters: FeedFilter) -> list:
    """Translate a FeedFilter into SQLAlchemy WHERE clauses."""
    conditions = [Post.status == PostStatus.PUBLISHED.value]

    if filters.tech_stack:
        conditions.append(_has_any_tag(TagKind.TECH, filters.tech_stack))

    if filters.skills:
        conditions.append(_has_any_tag(TagKind.SKILL, filters.skills))

    if filters.category:
        conditions.append(Post.category == filters.category)

    if filters.is_team_project is not None:
        conditions.append(Post.is_team_project == filters.is_team_project)

    # Author filters go through author -> profile (one-to-one)
    profile_conditions = []
    if filters.profession:
        profile_conditions.append(Profile.profession == filters.profession)
    if filters.is_open_to_work:
        profile_conditions.append(Profile.is_open_to_work.is_(True))
    if profile_conditions:
        conditions.append(Post.author.has(User.profile.has(and_(*profile_conditions))))

    if filters.search:
        pattern = f"%{_escape_like(filters.search)}%"
        conditions.append(or_(
            Post.title.ilike(pattern, escape="\\"),
            Post.summary.ilike(pattern, escape="\\"),
            Post.content.ilike(pattern, escape="\\"),
            # Exact membership in either tag set
            Post.tags.any(PostTag.name == filters.search),
        ))

    return conditions


class PostRepository:
    """Feed queries over the posts table, bound to one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count(self, filters: FeedFilter) -> int:
        result = await self.db.execute(
            select(func.count(Post.id)).where(*build_conditions(filters))
        )
        return result.scalar() or 0

    async def find_many(
        self,
        filters: FeedFilter,
        order: FeedOrder,
        skip: int,
        take: int,
    ) -> List[Tuple[Post, EngagementCounts]]:
        """Fetch one window of matching posts with their engagement counts."""
        if order == FeedOrder.POPULAR:
            order_by = (Post.view_count.desc(), Post.id.desc())
        else:
            order_by = (Post.published_at.desc(), Post.id.desc())

        query = (
            self._with_counts()
            .where(*build_conditions(filters))
            .order_by(*order_by)
            .offset(skip)
            .limit(take)
        )
        return await self._fetch(query)

    async def find_editor_picks(self, limit: int = 5) -> List[Tuple[Post, EngagementCounts]]:
        query = (
            self._with_counts()
            .where(
                Post.status == PostStatus.PUBLISHED.value,
                Post.is_editor_pick.is_(True),
            )
            .order_by(Post.published_at.desc(), Post.id.desc())
            .limit(limit)
        )
        return await self._fetch(query)

    async def find_by_author(
        self,
        author_id: int,
        published_only: bool,
    ) -> List[Tuple[Post, EngagementCounts]]:
        query = self._with_counts().where(Post.author_id == author_id)
        if published_only:
            query = query.where(Post.status == PostStatus.PUBLISHED.value)
        return await self._fetch(query.order_by(Post.created_at.desc(), Post.id.desc()))

    async def get_with_counts(self, post_id: int) -> Optional[Tuple[Post, EngagementCounts]]:
        rows = await self._fetch(
            self._with_counts().where(Post.id == post_id).execution_options(populate_existing=True)
        )
        return rows[0] if rows else None

    async def tech_stack_counts(self, limit: int = 20) -> List[Tuple[str, int]]:
        """Tag frequency over PUBLISHED posts' tech stacks, most frequent first."""
        mentions = func.count(PostTag.id).label("mentions")
        result = await self.db.execute(
            select(PostTag.name, mentions)
            .join(Post, Post.id == PostTag.post_id)
            .where(
                Post.status == PostStatus.PUBLISHED.value,
                PostTag.kind == TagKind.TECH.value,
            )
            .group_by(PostTag.name)
            .order_by(mentions.desc(), PostTag.name.asc())
            .limit(limit)
        )
        return [(name, count) for name, count in result.all()]

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _with_counts():
        return select(
            Post,
            _count_subquery(Like, "likes_count"),
            _count_subquery(Comment, "comments_count"),
            _count_subquery(Bookmark, "bookmarks_count"),
        )

    async def _fetch(self, query) -> List[Tuple[Post, EngagementCounts]]:
        result = await self.db.execute(query)
        return [
            (post, EngagementCounts(likes=likes or 0, comments=comments or 0, bookmarks=bookmarks or 0))
            for post, likes, comments, bookmarks in result.all()
        ]
