"""Report model for user-submitted report text."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Integer, LargeBinary, func
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column
from chat_reports.database import Base


class Report(Base):
    """A stored report. Content is kept as UTF-8 bytes and decoded on read."""

    __tablename__ = "report"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    def __repr__(self):
        return f"<Report(id={self.id}, created_at='{self.created_at}')>"
