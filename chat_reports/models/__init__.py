"""Database models."""

from chat_reports.models.report import Report

__all__ = [
    "Report",
]
