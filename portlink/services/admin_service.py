from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.models.enums import PostStatus, NotificationType, ReportAction, ReportStatus
from portlink.models.moderation import Report
from portlink.models.post import Post
from portlink.services.exceptions import NotFoundError
from portlink.services.feed_service import FeedService
from portlink.services.notification_service import NotificationService
from portlink.services.report_service import ReportService
from portlink.utils.logger import get_logger

logger = get_logger(__name__)


class AdminService:
    """
    Moderation and curation.

    Editor picks, hiding and report handling that hides a post all change
    feed membership, so each of them invalidates the feed cache.
    """

    def __init__(self, db: AsyncSession, feed_service: FeedService, notifications: NotificationService):
        self.db = db
        self.feed_service = feed_service
        self.notifications = notifications
        self.reports = ReportService(db)

    async def _get_post(self, post_id: int) -> Post:
        post = (await self.db.execute(select(Post).where(Post.id == post_id))).scalar_one_or_none()
        if post is None:
            raise NotFoundError("Post not found")
        return post

    async def _notify_hidden(self, post: Post) -> None:
        await self.notifications.create(
            user_id=post.author_id,
            type=NotificationType.POST_HIDDEN.value,
            title="Your post was hidden",
            message=f'After review, "{post.title}" was hidden by a moderator.',
            related_post_id=post.id,
        )

    async def set_editor_pick(self, post_id: int, is_editor_pick: bool) -> Post:
        post = await self._get_post(post_id)
        post.is_editor_pick = is_editor_pick
        await self.db.commit()
        logger.info(f"Post {post_id} editor pick -> {is_editor_pick}")

        await self.feed_service.invalidate_feed_cache()
        return post

    async def hide_post(self, post_id: int) -> Post:
        post = await self._get_post(post_id)
        post.status = PostStatus.HIDDEN.value
        await self._notify_hidden(post)
        await self.db.commit()
        logger.info(f"Post {post_id} hidden by moderator")

        await self.feed_service.invalidate_feed_cache()
        return post

    # ─────────────────────────────────────────────────────────────────
    # Reports
    # ─────────────────────────────────────────────────────────────────

    async def list_reports(self, status: Optional[ReportStatus] = None) -> list[Report]:
        query = select(Report)
        if status is not None:
            query = query.where(Report.status == status.value)
        result = await self.db.execute(query.order_by(Report.created_at.desc(), Report.id.desc()))
        return list(result.scalars().all())

    async def get_report(self, report_id: int) -> Report:
        return await self.reports.get(report_id)

    async def handle_report(self, report_id: int, action: ReportAction, admin_note: Optional[str] = None) -> dict:
        """
        Resolve a report. "hide" also hides the reported post and tells its
        author; the reporter is told either way.
        """
        report = await self.reports.get(report_id)
        report.status = ReportStatus.RESOLVED.value
        report.admin_note = admin_note

        post = await self._get_post(report.post_id)
        hidden = action == ReportAction.HIDE
        if hidden:
            post.status = PostStatus.HIDDEN.value
            await self._notify_hidden(post)

        await self.notifications.create(
            user_id=report.reporter_id,
            type=NotificationType.REPORT.value,
            title="Your report was handled",
            message=(
                f'The reported post "{post.title}" was hidden.'
                if hidden else
                f'After review, "{post.title}" stays up.'
            ),
            related_post_id=post.id,
        )
        await self.db.commit()
        logger.info(f"🚩 Report {report_id} resolved: {action.value}")

        if hidden:
            await self.feed_service.invalidate_feed_cache()
        return {"message": f"Report handled: {action.value}"}
