"""
Maintenance tasks for the feed cache and notification retention.

These tasks run on schedule to:
1. Pre-warm editor picks and trending tags so the first request after a
   TTL expiry never pays for the aggregation
2. Delete read notifications past the retention window
"""
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

from celery import shared_task
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.cache.redis_client import RedisCache, CacheKeys
from portlink.config.settings import settings
from portlink.database.config import AsyncSessionLocal
from portlink.repositories.post_repository import PostRepository
from portlink.services.feed_service import FeedService
from portlink.services.notification_service import NotificationService
from portlink.utils.logger import logger


async def warm_feed_cache(db: AsyncSession, cache: RedisCache) -> dict:
    """Recompute editor picks and trending tags and overwrite their cache entries."""
    feed_service = FeedService(PostRepository(db), cache=cache)

    picks = await feed_service.compute_editor_picks()
    tags = await feed_service.compute_trending_tags()

    await cache.set(
        CacheKeys.editor_picks(),
        [post.model_dump(mode="json", by_alias=True) for post in picks],
        ttl=settings.editor_picks_cache_ttl,
    )
    await cache.set(
        CacheKeys.trending_tags(),
        [tag.model_dump(mode="json") for tag in tags],
        ttl=settings.trending_tags_cache_ttl,
    )

    logger.info(f"🔥 Warmed feed cache: {len(picks)} editor picks, {len(tags)} trending tags")
    return {"editor_picks": len(picks), "trending_tags": len(tags)}


async def purge_read_notifications(
    db: AsyncSession,
    retention_days: int,
    now: Optional[datetime] = None,
) -> dict:
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=retention_days)
    deleted = await NotificationService(db).cleanup_read_before(cutoff)
    return {"notifications_deleted": deleted, "cutoff_date": cutoff.isoformat()}


@shared_task(
    name="portlink.tasks.maintenance_tasks.refresh_feed_cache",
    bind=True,
)
def refresh_feed_cache(self):
    """
    Pre-compute and cache editor picks and trending tags.

    Run: Every 10 minutes

    Returns:
        Dict with cache refresh status
    """
    async def _refresh():
        result = {
            "refreshed_at": datetime.now(timezone.utc).isoformat(),
            "cache_status": "failed",
        }

        cache = RedisCache()
        await cache.connect()
        if not cache.is_connected:
            result["cache_status"] = "cache_unavailable"
            return result

        try:
            async with AsyncSessionLocal() as db:
                result.update(await warm_feed_cache(db, cache))
            result["cache_status"] = "success"
        finally:
            await cache.disconnect()

        return result

    return asyncio.run(_refresh())


@shared_task(
    name="portlink.tasks.maintenance_tasks.cleanup_old_notifications",
    bind=True,
    max_retries=2,
    default_retry_delay=300,
)
def cleanup_old_notifications(self, retention_days: Optional[int] = None):
    """
    Delete read notifications older than the retention period.

    Unread notifications are kept whatever their age.

    Run: Weekly (Sunday 3 AM UTC)

    Args:
        retention_days: Days to keep (default settings.notification_retention_days)
    """
    days = retention_days or settings.notification_retention_days

    async def _cleanup():
        async with AsyncSessionLocal() as db:
            try:
                return await purge_read_notifications(db, days)
            except Exception as e:
                await db.rollback()
                logger.error(f"Notification cleanup failed: {e}")
                raise

    try:
        return asyncio.run(_cleanup())
    except Exception as e:
        logger.error(f"Maintenance task failed: {e}")
        raise self.retry(exc=e)
