"""Data access layer."""

from chat_reports.repositories.report_repository import ReportRepository

__all__ = ["ReportRepository"]
