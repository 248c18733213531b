"""Repository for Report model operations."""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from chat_reports.models.report import Report
from chat_reports.utils.logger import get_logger

log = get_logger(__name__)


class ReportRepository:
    """Repository for Report create and list operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, content: str) -> Report:
        """Insert a report and return it with its database-assigned id and timestamp."""
        report = Report(content=content.encode("utf-8"))
        self.session.add(report)
        await self.session.commit()
        await self.session.refresh(report)
        log.debug("report stored", report_id=report.id, content_bytes=len(report.content))
        return report

    async def list_descending_by_time(self) -> list[Report]:
        """All reports, newest first. No pagination."""
        result = await self.session.execute(
            select(Report).order_by(Report.created_at.desc(), Report.id.desc())
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Report))
        return result.scalar_one()
