from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.models.engagement import Like, Bookmark, Comment
from portlink.models.enums import NotificationType
from portlink.models.post import Post
from portlink.services.exceptions import NotFoundError, ForbiddenError
from portlink.services.mention_service import MentionService
from portlink.services.notification_service import NotificationService
from portlink.utils.logger import get_logger

logger = get_logger(__name__)


class EngagementService:
    """
    Likes, bookmarks and comments on published posts.

    Likes and bookmarks are unique per (post, user) and toggle. Creating
    any of the three notifies the post author, except on their own post.
    @mentions in a new comment notify the mentioned users.
    Engagement does not invalidate the feed cache: counts in cached pages
    catch up when the TTL runs out.
    """

    def __init__(self, db: AsyncSession, notifications: NotificationService, mentions: Optional[MentionService] = None):
        self.db = db
        self.notifications = notifications
        self.mentions = mentions

    async def _get_engageable_post(self, post_id: int, action: str) -> Post:
        result = await self.db.execute(select(Post).where(Post.id == post_id))
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError("Post not found")
        if not post.is_published:
            raise ForbiddenError(f"Cannot {action} unpublished posts")
        return post

    async def _notify_author(self, post: Post, actor_id: int, type: NotificationType, title: str, message: str) -> None:
        if post.author_id == actor_id:
            return
        await self.notifications.create(
            user_id=post.author_id,
            type=type.value,
            title=title,
            message=message,
            related_post_id=post.id,
            related_user_id=actor_id,
        )

    # ─────────────────────────────────────────────────────────────────
    # Likes
    # ─────────────────────────────────────────────────────────────────

    async def toggle_like(self, post_id: int, user_id: int) -> dict:
        post = await self._get_engageable_post(post_id, "like")

        existing = (await self.db.execute(
            select(Like).where(Like.post_id == post_id, Like.user_id == user_id)
        )).scalar_one_or_none()

        if existing:
            await self.db.delete(existing)
            await self.db.commit()
            return {"liked": False, "message": "Post unliked"}

        self.db.add(Like(post_id=post_id, user_id=user_id))
        await self._notify_author(
            post, user_id, NotificationType.LIKE,
            title="New like",
            message=f'Your post "{post.title}" received a new like.',
        )
        await self.db.commit()
        logger.debug(f"User {user_id} liked post {post_id}")
        return {"liked": True, "message": "Post liked"}

    async def like_status(self, post_id: int, user_id: int) -> dict:
        like = (await self.db.execute(
            select(Like.id).where(Like.post_id == post_id, Like.user_id == user_id)
        )).scalar_one_or_none()
        return {"liked": like is not None}

    async def post_likes(self, post_id: int) -> dict:
        result = await self.db.execute(
            select(Like).where(Like.post_id == post_id).order_by(Like.created_at.desc(), Like.id.desc())
        )
        likes = result.scalars().all()
        return {
            "count": len(likes),
            "users": [
                {
                    "id": like.user.id,
                    "username": like.user.username,
                    "name": like.user.profile.name if like.user.profile else None,
                }
                for like in likes
            ],
        }

    # ─────────────────────────────────────────────────────────────────
    # Bookmarks
    # ─────────────────────────────────────────────────────────────────

    async def toggle_bookmark(self, post_id: int, user_id: int) -> dict:
        post = await self._get_engageable_post(post_id, "bookmark")

        existing = (await self.db.execute(
            select(Bookmark).where(Bookmark.post_id == post_id, Bookmark.user_id == user_id)
        )).scalar_one_or_none()

        if existing:
            await self.db.delete(existing)
            await self.db.commit()
            return {"bookmarked": False, "message": "Bookmark removed"}

        self.db.add(Bookmark(post_id=post_id, user_id=user_id))
        await self._notify_author(
            post, user_id, NotificationType.BOOKMARK,
            title="Your post was bookmarked",
            message=f'"{post.title}" was bookmarked.',
        )
        await self.db.commit()
        return {"bookmarked": True, "message": "Post bookmarked"}

    async def bookmark_status(self, post_id: int, user_id: int) -> dict:
        bookmark = (await self.db.execute(
            select(Bookmark.id).where(Bookmark.post_id == post_id, Bookmark.user_id == user_id)
        )).scalar_one_or_none()
        return {"bookmarked": bookmark is not None}

    async def list_user_bookmarks(self, user_id: int) -> list[Bookmark]:
        result = await self.db.execute(
            select(Bookmark)
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        )
        return list(result.scalars().all())

    # ─────────────────────────────────────────────────────────────────
    # Comments
    # ─────────────────────────────────────────────────────────────────

    async def add_comment(self, post_id: int, author_id: int, content: str) -> Comment:
        post = await self._get_engageable_post(post_id, "comment on")

        comment = Comment(post_id=post_id, author_id=author_id, content=content)
        self.db.add(comment)
        if self.mentions is not None:
            await self.db.flush()
            await self.mentions.process_in_comment(comment.id, post.id, post.title, author_id, content)
        await self._notify_author(
            post, author_id, NotificationType.COMMENT,
            title="New comment",
            message=f'Someone commented on "{post.title}".',
        )
        await self.db.commit()
        return await self._get_comment(comment.id)

    async def list_comments(self, post_id: int) -> list[Comment]:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list(result.scalars().all())

    async def _get_comment(self, comment_id: int) -> Comment:
        result = await self.db.execute(
            select(Comment).where(Comment.id == comment_id).execution_options(populate_existing=True)
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def update_comment(self, comment_id: int, user_id: int, content: str) -> Comment:
        comment = await self._get_comment(comment_id)
        if comment.author_id != user_id:
            raise ForbiddenError("You can only update your own comments")
        comment.content = content
        await self.db.commit()
        return await self._get_comment(comment_id)

    async def delete_comment(self, comment_id: int, user_id: int) -> None:
        comment = await self._get_comment(comment_id)
        if comment.author_id != user_id:
            raise ForbiddenError("You can only delete your own comments")
        await self.db.delete(comment)
        await self.db.commit()
