from typing import Optional

from fastapi import APIRouter, Depends

from portlink.api.dependencies import get_admin_service, require_admin
from portlink.api.middleware.rate_limit import rate_limit
from portlink.api.schemas.base import CamelModel
from portlink.api.schemas.notifications import MessageResponse
from portlink.api.schemas.posts import PostResponse
from portlink.api.schemas.reports import AdminReportResponse, HandleReport
from portlink.models.enums import ReportStatus
from portlink.services.admin_service import AdminService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin), Depends(rate_limit("admin:moderate"))],
)


class EditorPickUpdate(CamelModel):
    is_editor_pick: bool = True


@router.patch("/posts/{post_id}/editor-pick", response_model=PostResponse)
async def set_editor_pick(
    post_id: int,
    data: EditorPickUpdate,
    admin: AdminService = Depends(get_admin_service),
):
    post = await admin.set_editor_pick(post_id, data.is_editor_pick)
    return PostResponse.from_row(post)


@router.patch("/posts/{post_id}/hide", response_model=PostResponse)
async def hide_post(
    post_id: int,
    admin: AdminService = Depends(get_admin_service),
):
    """Hide a post from the feed and tell its author"""
    post = await admin.hide_post(post_id)
    return PostResponse.from_row(post)


# ─────────────────────────────────────────────────────────────────
# Reports
# ─────────────────────────────────────────────────────────────────

@router.get("/reports", response_model=list[AdminReportResponse])
async def list_reports(
    status: Optional[ReportStatus] = None,
    admin: AdminService = Depends(get_admin_service),
):
    return [AdminReportResponse.from_report(r) for r in await admin.list_reports(status)]


@router.get("/reports/{report_id}", response_model=AdminReportResponse)
async def get_report(
    report_id: int,
    admin: AdminService = Depends(get_admin_service),
):
    return AdminReportResponse.from_report(await admin.get_report(report_id))


@router.post("/reports/{report_id}/handle", response_model=MessageResponse)
async def handle_report(
    report_id: int,
    data: HandleReport,
    admin: AdminService = Depends(get_admin_service),
):
    """Resolve a report; "hide" also takes the post out of the feed"""
    return await admin.handle_report(report_id, data.action, data.admin_note)
