"""Middleware components for request processing."""

from .admission import admission_middleware
from .body_limit import BodySizeLimitMiddleware
from .error_handler import register_exception_handlers, unhandled_exception_middleware
from .logging import logging_middleware
from .security_headers import security_headers_middleware

__all__ = [
    "admission_middleware",
    "BodySizeLimitMiddleware",
    "register_exception_handlers",
    "logging_middleware",
    "security_headers_middleware",
    "unhandled_exception_middleware",
]
