"""Reports router."""

from fastapi import APIRouter, status
from sqlalchemy.exc import SQLAlchemyError

from chat_reports.dependencies import ReportRepoDep, StrictLimitGuard
from chat_reports.exceptions import DatabaseError
from chat_reports.schemas.reports import (
    ReportCreate,
    ReportCreatedResponse,
    ReportListResponse,
    ReportResponse,
)
from chat_reports.utils.logger import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("", response_model=ReportListResponse)
async def list_reports(report_repo: ReportRepoDep) -> ReportListResponse:
    """List every report, newest first."""
    try:
        reports = await report_repo.list_descending_by_time()
    except SQLAlchemyError as e:
        log.error("failed to fetch reports", error=str(e))
        raise DatabaseError("Failed to fetch reports", details=str(e)) from e

    return ReportListResponse(
        data=[ReportResponse.from_model(r) for r in reports],
        count=len(reports),
    )


@router.post("", response_model=ReportCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    _: StrictLimitGuard,
    payload: ReportCreate,
    report_repo: ReportRepoDep,
) -> ReportCreatedResponse:
    """Store a new report. ``payload.content`` is already trimmed and non-empty."""
    try:
        report = await report_repo.create(payload.content)
    except SQLAlchemyError as e:
        log.error("failed to create report", error=str(e))
        raise DatabaseError("Failed to create report", details=str(e)) from e

    log.info("report created", report_id=report.id)
    return ReportCreatedResponse(data=ReportResponse.from_model(report))
