from datetime import datetime
from typing import Optional

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.models.notification import Notification
from portlink.services.exceptions import NotFoundError
from portlink.utils.logger import get_logger

logger = get_logger(__name__)


class NotificationService:
    """Notification rows created on domain events (like, bookmark, comment, moderation)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        user_id: int,
        type: str,
        title: str,
        message: str,
        related_post_id: Optional[int] = None,
        related_user_id: Optional[int] = None,
    ) -> Notification:
        """Add a notification to the caller's transaction (committed by the caller)."""
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            related_post_id=related_post_id,
            related_user_id=related_user_id,
            is_read=False,
        )
        self.db.add(notification)
        logger.debug(f"Notification queued for user {user_id}: {type}")
        return notification

    async def list_for_user(self, user_id: int, only_unread: bool = False) -> list[Notification]:
        query = select(Notification).where(Notification.user_id == user_id)
        if only_unread:
            query = query.where(Notification.is_read.is_(False))
        result = await self.db.execute(
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())

    async def mark_as_read(self, notification_id: int, user_id: int) -> None:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
        )
        if result.rowcount == 0:
            raise NotFoundError("Notification not found")
        await self.db.commit()

    async def mark_all_as_read(self, user_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        await self.db.commit()
        return result.rowcount

    async def unread_count(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        )
        return result.scalar() or 0

    async def delete(self, notification_id: int, user_id: int) -> None:
        result = await self.db.execute(
            delete(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            raise NotFoundError("Notification not found")
        await self.db.commit()

    async def cleanup_read_before(self, cutoff: datetime) -> int:
        """Delete read notifications older than cutoff. Returns rows removed."""
        result = await self.db.execute(
            delete(Notification).where(
                Notification.is_read.is_(True),
                Notification.created_at < cutoff,
            )
        )
        await self.db.commit()
        logger.info(f"🧹 Removed {result.rowcount} read notifications older than {cutoff.isoformat()}")
        return result.rowcount
