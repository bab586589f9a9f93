from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portlink.models.enums import ReportStatus, ReportType
from portlink.models.moderation import Report
from portlink.models.post import Post
from portlink.services.exceptions import NotFoundError, ForbiddenError, ConflictError
from portlink.utils.logger import get_logger

logger = get_logger(__name__)

# A report in one of these states blocks a second one from the same user
OPEN_STATUSES = (ReportStatus.PENDING.value, ReportStatus.REVIEWED.value)


class ReportService:
    """User-facing side of post reports. Moderators act on them through AdminService."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, reporter_id: int, post_id: int, type: ReportType, reason: str) -> Report:
        post = (await self.db.execute(select(Post).where(Post.id == post_id))).scalar_one_or_none()
        if post is None:
            raise NotFoundError("Post not found")
        if post.author_id == reporter_id:
            raise ConflictError("You cannot report your own post")

        existing = (await self.db.execute(
            select(Report.id).where(
                Report.post_id == post_id,
                Report.reporter_id == reporter_id,
                Report.status.in_(OPEN_STATUSES),
            )
        )).first()
        if existing is not None:
            raise ConflictError("Report already submitted for this post")

        report = Report(
            reporter_id=reporter_id,
            post_id=post_id,
            type=type.value,
            reason=reason,
            status=ReportStatus.PENDING.value,
        )
        self.db.add(report)
        await self.db.commit()
        logger.info(f"🚩 Post {post_id} reported by user {reporter_id} ({type.value})")
        return await self.get(report.id)

    async def get(self, report_id: int) -> Report:
        result = await self.db.execute(
            select(Report).where(Report.id == report_id).execution_options(populate_existing=True)
        )
        report = result.scalar_one_or_none()
        if report is None:
            raise NotFoundError("Report not found")
        return report

    async def get_own(self, report_id: int, user_id: int) -> Report:
        report = await self.get(report_id)
        if report.reporter_id != user_id:
            raise ForbiddenError("You can only view your own reports")
        return report

    async def list_for_reporter(self, reporter_id: int) -> list[Report]:
        result = await self.db.execute(
            select(Report)
            .where(Report.reporter_id == reporter_id)
            .order_by(Report.created_at.desc(), Report.id.desc())
        )
        return list(result.scalars().all())
