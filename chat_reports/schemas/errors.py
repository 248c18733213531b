"""Error response helpers."""

from typing import Optional

from fastapi.responses import JSONResponse

from chat_reports.schemas.common import ErrorResponse


def error_response(
    status_code: int,
    message: str,
    *,
    retry_after: Optional[str] = None,
    details: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build a failure envelope response."""
    body = ErrorResponse(error=message, retry_after=retry_after, details=details)
    return JSONResponse(status_code=status_code, content=body.to_content(), headers=headers)
