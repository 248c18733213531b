"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from chat_reports.database import get_db
from chat_reports.exceptions import RateLimitExceededError
from chat_reports.repositories.report_repository import ReportRepository
from chat_reports.services.admission import AdmissionController

# Type aliases for cleaner router signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]


# ============================================================================
# Report Repository
# ============================================================================


def get_report_repository(db: DbSession) -> ReportRepository:
    """Get ReportRepository with database session."""
    return ReportRepository(db)


ReportRepoDep = Annotated[ReportRepository, Depends(get_report_repository)]


# ============================================================================
# Admission Control Dependencies
# ============================================================================


def get_admission_controller(request: Request) -> AdmissionController:
    """Get the admission controller created in the application lifespan."""
    return request.app.state.admission


AdmissionDep = Annotated[AdmissionController, Depends(get_admission_controller)]


async def enforce_strict_limit(
    request: Request,
    controller: AdmissionDep,
) -> None:
    """Enforce the per-endpoint strict limit. Raises 429 if exceeded.

    The headers are left on ``request.state`` so the admission middleware puts
    them on whatever response the route ends with, error envelopes included.
    """
    limiter = controller.strict
    decision = limiter.check(controller.identify(request))
    headers = limiter.headers(decision)
    request.state.rate_limit_headers = headers

    if not decision.allowed:
        raise RateLimitExceededError(
            limiter.message,
            retry_after=limiter.retry_after_text,
            headers=headers,
        )


StrictLimitGuard = Annotated[None, Depends(enforce_strict_limit)]
