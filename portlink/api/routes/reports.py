from fastapi import APIRouter, Depends, status

from portlink.api.dependencies import get_report_service, get_current_user_id
from portlink.api.middleware.rate_limit import rate_limit
from portlink.api.schemas.reports import ReportCreate, ReportResponse
from portlink.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post(
    "",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("reports:create"))],
)
async def create_report(
    data: ReportCreate,
    user_id: int = Depends(get_current_user_id),
    reports: ReportService = Depends(get_report_service),
):
    return await reports.create(user_id, data.post_id, data.type, data.reason)


# Declared before /{report_id} so "me" is never parsed as an id
@router.get("/me", response_model=list[ReportResponse])
async def my_reports(
    user_id: int = Depends(get_current_user_id),
    reports: ReportService = Depends(get_report_service),
):
    return await reports.list_for_reporter(user_id)


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: int,
    user_id: int = Depends(get_current_user_id),
    reports: ReportService = Depends(get_report_service),
):
    return await reports.get_own(report_id, user_id)
