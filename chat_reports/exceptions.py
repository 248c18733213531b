"""API exception hierarchy.

Every exception carries the HTTP status it maps to. The handlers in
``chat_reports.middleware.error_handler`` turn them into the failure envelope
``{"success": false, "error": ..., "retryAfter"?: ..., "details"?: ...}``.
"""

from typing import Optional


class BaseAPIException(Exception):
    """Base class for errors that are translated into an HTTP response."""

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        details: Optional[str] = None,
        retry_after: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.retry_after = retry_after
        self.headers = headers or {}


class DatabaseError(BaseAPIException):
    """Storage operation failed (connection loss, constraint violation, ...)."""

    status_code = 500
    error_code = "DATABASE_ERROR"

    def __init__(self, message: str = "Database operation failed", **kwargs):
        super().__init__(message, **kwargs)


class RateLimitExceededError(BaseAPIException):
    """A fixed-window rate limiter rejected the request."""

    status_code = 429
    error_code = "RATE_LIMIT_EXCEEDED"


class PayloadTooLargeError(BaseAPIException):
    status_code = 413
    error_code = "PAYLOAD_TOO_LARGE"

    def __init__(self, message: str = "Request payload too large", **kwargs):
        super().__init__(message, **kwargs)


class RouteNotFoundError(BaseAPIException):
    status_code = 404
    error_code = "ROUTE_NOT_FOUND"

    def __init__(self, message: str = "Route not found", **kwargs):
        super().__init__(message, **kwargs)
