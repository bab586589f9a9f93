import math
import re
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.models.enums import NotificationType
from portlink.models.moderation import Mention
from portlink.models.user import User
from portlink.services.notification_service import NotificationService
from portlink.utils.logger import get_logger

logger = get_logger(__name__)

# A letter, then 2-29 letters, digits, "_" or "."
MENTION_PATTERN = re.compile(r"@([a-zA-Z][a-zA-Z0-9_.]{2,29})")


def extract_mentions(content: Optional[str]) -> list[str]:
    """Lowercased @usernames in first-seen order, without duplicates."""
    if not content:
        return []
    seen = []
    for match in MENTION_PATTERN.finditer(content):
        username = match.group(1).lower()
        if username not in seen:
            seen.append(username)
    return seen


class MentionService:
    """
    @username mentions in published posts and in comments.

    Each mention of an existing user (other than the writer) stores a
    Mention row and queues a "mention" notification. Rows are added to the
    caller's transaction; the caller commits.
    """

    def __init__(self, db: AsyncSession, notifications: NotificationService):
        self.db = db
        self.notifications = notifications

    async def _resolve(self, content: Optional[str], author_id: int) -> list[User]:
        usernames = extract_mentions(content)
        if not usernames:
            return []
        result = await self.db.execute(
            select(User).where(func.lower(User.username).in_(usernames), User.id != author_id)
        )
        return list(result.scalars().all())

    @staticmethod
    def _display_name(author: User) -> str:
        if author.profile and author.profile.name:
            return author.profile.name
        return author.username

    async def _author(self, author_id: int) -> Optional[User]:
        return (await self.db.execute(select(User).where(User.id == author_id))).scalar_one_or_none()

    async def process_in_post(self, post_id: int, author_id: int, title: str, content: str) -> list[Mention]:
        users = await self._resolve(content, author_id)
        if not users:
            return []
        author = await self._author(author_id)
        name = self._display_name(author) if author else "Someone"

        mentions = []
        for user in users:
            mention = Mention(author_id=author_id, mentioned_user_id=user.id, post_id=post_id)
            self.db.add(mention)
            mentions.append(mention)
            await self.notifications.create(
                user_id=user.id,
                type=NotificationType.MENTION.value,
                title="You were mentioned",
                message=f'{name} mentioned you in "{title}"',
                related_post_id=post_id,
                related_user_id=author_id,
            )
        logger.info(f"Post {post_id}: {len(mentions)} mention(s) by user {author_id}")
        return mentions

    async def process_in_comment(
        self, comment_id: int, post_id: int, post_title: str, author_id: int, content: str,
    ) -> list[Mention]:
        users = await self._resolve(content, author_id)
        if not users:
            return []
        author = await self._author(author_id)
        name = self._display_name(author) if author else "Someone"

        mentions = []
        for user in users:
            mention = Mention(author_id=author_id, mentioned_user_id=user.id, comment_id=comment_id)
            self.db.add(mention)
            mentions.append(mention)
            await self.notifications.create(
                user_id=user.id,
                type=NotificationType.MENTION.value,
                title="You were mentioned in a comment",
                message=f'{name} mentioned you in a comment on "{post_title}"',
                related_post_id=post_id,
                related_user_id=author_id,
            )
        logger.info(f"Comment {comment_id}: {len(mentions)} mention(s) by user {author_id}")
        return mentions

    async def list_for_user(self, user_id: int, page: int = 1, limit: int = 20) -> dict:
        total = (await self.db.execute(
            select(func.count(Mention.id)).where(Mention.mentioned_user_id == user_id)
        )).scalar() or 0
        result = await self.db.execute(
            select(Mention)
            .where(Mention.mentioned_user_id == user_id)
            .order_by(Mention.created_at.desc(), Mention.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return {
            "data": list(result.scalars().all()),
            "meta": {
                "total": total,
                "page": page,
                "limit": limit,
                "total_pages": math.ceil(total / limit) if total else 0,
            },
        }

    async def search_users(self, query: str, limit: int = 10) -> list[User]:
        """Username autocomplete (case-insensitive prefix match)."""
        prefix = query.strip().lstrip("@").lower()
        if not prefix:
            return []
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        result = await self.db.execute(
            select(User)
            .where(func.lower(User.username).like(f"{escaped}%", escape="\\"))
            .order_by(User.username)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def username_exists(self, username: str) -> bool:
        result = await self.db.execute(
            select(User.id).where(func.lower(User.username) == username.strip().lstrip("@").lower())
        )
        return result.scalar_one_or_none() is not None
