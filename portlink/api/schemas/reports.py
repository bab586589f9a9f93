from datetime import datetime
from typing import Optional

from pydantic import Field

from portlink.api.schemas.base import CamelModel
from portlink.api.schemas.posts import AuthorSummary
from portlink.models.enums import ReportAction, ReportStatus, ReportType


class ReportCreate(CamelModel):
    post_id: int
    type: ReportType
    reason: str = Field(..., min_length=10, max_length=500)


class ReportedPost(CamelModel):
    id: int
    title: str
    author_id: int


class ReportResponse(CamelModel):
    id: int
    post_id: int
    reporter_id: int
    type: ReportType
    reason: str
    status: ReportStatus
    admin_note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    post: Optional[ReportedPost] = None


class AdminReportResponse(ReportResponse):
    reporter: Optional[AuthorSummary] = None

    @classmethod
    def from_report(cls, report) -> "AdminReportResponse":
        reporter = AuthorSummary.from_user(report.reporter) if report.reporter else None
        return cls.model_validate(report).model_copy(update={"reporter": reporter})


class HandleReport(CamelModel):
    action: ReportAction
    admin_note: Optional[str] = Field(None, max_length=500)
