"""
FastAPI dependencies: cache, identity and service construction.

Services are built per request around the request's AsyncSession. The
cache comes from app.state (set in the lifespan), so tests can swap it by
assigning app.state.cache or overriding get_cache.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.cache.redis_client import RedisCache
from portlink.database.config import get_db
from portlink.models.user import User
from portlink.repositories.post_repository import PostRepository
from portlink.services.admin_service import AdminService
from portlink.services.engagement_service import EngagementService
from portlink.services.exceptions import ForbiddenError, NotFoundError
from portlink.services.feed_service import FeedService
from portlink.services.mention_service import MentionService
from portlink.services.notification_service import NotificationService
from portlink.services.post_service import PostService
from portlink.services.report_service import ReportService
from portlink.services.user_service import UserService


def get_cache(request: Request) -> Optional[RedisCache]:
    """None when Redis was unreachable at startup (uncached mode)."""
    return getattr(request.app.state, "cache", None)


# ═══════════════════════════════════════════════════════════════════════════════
# IDENTITY (X-User-Id is set by the upstream auth layer)
# ═══════════════════════════════════════════════════════════════════════════════

def _parse_user_id(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid X-User-Id header",
        )


async def get_optional_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> Optional[int]:
    return _parse_user_id(x_user_id)


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> int:
    user_id = _parse_user_id(x_user_id)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user_id


# ═══════════════════════════════════════════════════════════════════════════════
# SERVICES
# ═══════════════════════════════════════════════════════════════════════════════

def get_feed_service(
    db: AsyncSession = Depends(get_db),
    cache: Optional[RedisCache] = Depends(get_cache),
) -> FeedService:
    return FeedService(PostRepository(db), cache=cache)


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_mention_service(
    db: AsyncSession = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
) -> MentionService:
    return MentionService(db, notifications)


def get_report_service(db: AsyncSession = Depends(get_db)) -> ReportService:
    return ReportService(db)


def get_post_service(
    db: AsyncSession = Depends(get_db),
    feed_service: FeedService = Depends(get_feed_service),
    mentions: MentionService = Depends(get_mention_service),
) -> PostService:
    return PostService(db, feed_service, mentions)


def get_engagement_service(
    db: AsyncSession = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
    mentions: MentionService = Depends(get_mention_service),
) -> EngagementService:
    return EngagementService(db, notifications, mentions)


def get_admin_service(
    db: AsyncSession = Depends(get_db),
    feed_service: FeedService = Depends(get_feed_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> AdminService:
    return AdminService(db, feed_service, notifications)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


async def require_admin(
    user_id: int = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> User:
    try:
        user = await users.get(user_id)
    except NotFoundError:
        raise ForbiddenError("Admin access required")
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user
