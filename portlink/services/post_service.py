from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.api.schemas.posts import PostCreate, PostUpdate, PostResponse
from portlink.models.enums import PostStatus, TagKind
from portlink.models.post import Post
from portlink.repositories.post_repository import PostRepository
from portlink.services.exceptions import NotFoundError, ForbiddenError
from portlink.services.feed_service import FeedService
from portlink.services.mention_service import MentionService
from portlink.utils.logger import get_logger

logger = get_logger(__name__)


class PostService:
    """
    Service layer for portfolio post writes and single-post reads.

    Every write that can change what the feed shows (create, update,
    publish, delete) commits first and then invalidates the feed cache.
    @mentions are processed once, when a post is first published.
    """

    def __init__(self, db: AsyncSession, feed_service: FeedService, mentions: Optional[MentionService] = None):
        self.db = db
        self.feed_service = feed_service
        self.mentions = mentions
        self.repository = PostRepository(db)

    async def _get_post(self, post_id: int) -> Post:
        result = await self.db.execute(select(Post).where(Post.id == post_id))
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError("Post not found")
        return post

    async def _get_owned_post(self, post_id: int, user_id: int, action: str) -> Post:
        post = await self._get_post(post_id)
        if post.author_id != user_id:
            raise ForbiddenError(f"You can only {action} your own posts")
        return post

    async def _response(self, post_id: int) -> PostResponse:
        row = await self.repository.get_with_counts(post_id)
        if row is None:
            raise NotFoundError("Post not found")
        return PostResponse.from_row(*row)

    async def create(self, author_id: int, data: PostCreate) -> PostResponse:
        status = data.status.value
        post = Post(
            author_id=author_id,
            title=data.title,
            summary=data.summary,
            content=data.content,
            category=data.category.value if data.category else None,
            is_team_project=data.is_team_project,
            status=status,
            view_count=0,
            is_editor_pick=False,
            published_at=datetime.now(timezone.utc) if status == PostStatus.PUBLISHED.value else None,
            tags=[],
        )
        post.set_tags(TagKind.TECH, data.tech_stack)
        post.set_tags(TagKind.SKILL, data.skills)

        self.db.add(post)
        if status == PostStatus.PUBLISHED.value:
            await self.db.flush()
            await self._process_mentions(post)
        await self.db.commit()
        logger.info(f"✏️  Post {post.id} created by user {author_id} ({status})")

        await self.feed_service.invalidate_feed_cache()
        return await self._response(post.id)

    async def find_one(self, post_id: int, viewer_id: Optional[int] = None) -> PostResponse:
        """
        Read a single post and count the view.

        view_count goes up by exactly one per call (no per-viewer dedup).
        Non-published posts are only visible to their author.
        """
        post = await self._get_post(post_id)
        if not post.is_published and post.author_id != viewer_id:
            raise NotFoundError("Post not found")

        # Atomic increment in SQL: concurrent reads never lose a view
        await self.db.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(view_count=Post.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        return await self._response(post_id)

    async def list_by_author(self, author_id: int, viewer_id: Optional[int] = None) -> list[PostResponse]:
        rows = await self.repository.find_by_author(
            author_id, published_only=viewer_id != author_id
        )
        return [PostResponse.from_row(post, counts) for post, counts in rows]

    async def update(self, post_id: int, user_id: int, data: PostUpdate) -> PostResponse:
        post = await self._get_owned_post(post_id, user_id, "update")
        changes = data.model_dump(exclude_unset=True)

        for field_name in ("title", "summary", "content", "is_team_project"):
            if field_name not in changes:
                continue
            if changes[field_name] is None and field_name != "summary":
                continue
            setattr(post, field_name, changes[field_name])

        if "category" in changes:
            post.category = data.category.value if data.category else None

        if "tech_stack" in changes:
            post.set_tags(TagKind.TECH, data.tech_stack or [])
        if "skills" in changes:
            post.set_tags(TagKind.SKILL, data.skills or [])

        if data.status is not None:
            first_publish = data.status == PostStatus.PUBLISHED and post.published_at is None
            self._apply_status(post, data.status)
            if first_publish:
                await self._process_mentions(post)

        await self.db.commit()
        logger.info(f"Post {post_id} updated by user {user_id}: {sorted(changes)}")

        await self.feed_service.invalidate_feed_cache()
        return await self._response(post_id)

    async def publish(self, post_id: int, user_id: int) -> PostResponse:
        return await self.update(post_id, user_id, PostUpdate(status=PostStatus.PUBLISHED))

    async def delete(self, post_id: int, user_id: int) -> None:
        post = await self._get_owned_post(post_id, user_id, "delete")
        await self.db.delete(post)
        await self.db.commit()
        logger.info(f"🗑️  Post {post_id} deleted by user {user_id}")

        await self.feed_service.invalidate_feed_cache()

    async def _process_mentions(self, post: Post) -> None:
        if self.mentions is not None:
            await self.mentions.process_in_post(post.id, post.author_id, post.title, post.content)

    @staticmethod
    def _apply_status(post: Post, status: PostStatus) -> None:
        """published_at is stamped on the first publish and kept afterwards."""
        post.status = status.value
        if status == PostStatus.PUBLISHED and post.published_at is None:
            post.published_at = datetime.now(timezone.utc)
