"""API routers."""

from chat_reports.routers import health, reports

__all__ = ["health", "reports"]
