"""Global exception handlers for consistent error responses."""

import traceback
from typing import Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from chat_reports.config import get_settings
from chat_reports.exceptions import BaseAPIException, DatabaseError, RouteNotFoundError
from chat_reports.schemas.errors import error_response
from chat_reports.schemas.reports import CONTENT_ERROR
from chat_reports.utils.logger import get_logger

log = get_logger(__name__)

INVALID_JSON_ERROR = "Invalid JSON format"


def _detail(exc: Exception) -> str | None:
    """Exception text for the response body, in development only."""
    if not get_settings().is_development:
        return None
    return str(exc) or type(exc).__name__


async def base_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Handle custom API exceptions."""
    log_method = log.error if exc.status_code >= 500 else log.info
    log_method(
        "api exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        method=request.method,
        path=request.url.path,
    )

    return error_response(
        exc.status_code,
        exc.message,
        retry_after=exc.retry_after,
        details=exc.details if get_settings().is_development else None,
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request, exc: Union[RequestValidationError, PydanticValidationError]
) -> JSONResponse:
    """Handle request parsing failures: malformed JSON or an invalid report body."""
    errors = exc.errors()
    log.info(
        "validation error",
        path=request.url.path,
        errors=[{k: v for k, v in e.items() if k not in ("ctx", "input")} for e in errors],
    )

    if any(e.get("type") == "json_invalid" for e in errors):
        message = INVALID_JSON_ERROR
    else:
        message = CONTENT_ERROR

    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unmatched paths and methods become 404; other HTTP errors keep their status."""
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        not_found = RouteNotFoundError()
        log.info(
            "route not found",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )
        return error_response(not_found.status_code, not_found.message)

    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy database errors."""
    log.error("database error", error=str(exc), traceback=traceback.format_exc())

    db_error = DatabaseError()
    return error_response(db_error.status_code, db_error.message, details=_detail(exc))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    log.critical(
        "unhandled exception",
        error_type=type(exc).__name__,
        error=str(exc),
        traceback=traceback.format_exc(),
    )

    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        details=_detail(exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI application."""
    app.add_exception_handler(BaseAPIException, base_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)

    log.info("exception handlers registered")


async def unhandled_exception_middleware(request: Request, call_next):
    """
    Render unexpected exceptions as the 500 envelope inside the other
    middleware layers, so the response still carries security, request id
    and rate-limit headers.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return await generic_exception_handler(request, exc)
