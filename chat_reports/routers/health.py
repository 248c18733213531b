"""Health check router."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter

from chat_reports.schemas.health import HealthResponse

router = APIRouter()

_PROCESS_START = time.monotonic()


def process_uptime() -> float:
    """Seconds since this process started serving, monotonic."""
    return time.monotonic() - _PROCESS_START


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe. Touches no state."""
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        uptime=round(process_uptime(), 3),
    )
