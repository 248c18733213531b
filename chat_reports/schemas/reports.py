"""Schemas for report operations."""

from datetime import datetime
from typing import Any

from pydantic import Field, StrictStr, field_validator

from chat_reports.schemas.common import CamelModel, SuccessResponse

CONTENT_ERROR = "Content is required and must be a string"


class ReportCreate(CamelModel):
    """Body of POST /reports.

    ``content`` must be a JSON string (numbers and other types are not coerced)
    that is non-empty once surrounding whitespace is trimmed. The validated
    value is the trimmed text.
    """

    content: StrictStr

    @field_validator("content")
    @classmethod
    def strip_and_require(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError(CONTENT_ERROR)
        return v


class ReportResponse(CamelModel):
    """A single report as returned to clients."""

    id: int = Field(..., description="Report ID")
    content: str = Field(..., description="Report text")
    created_at: datetime = Field(..., description="When the report was created")

    @classmethod
    def from_model(cls, report: Any) -> "ReportResponse":
        """Build from an ORM row, decoding the stored UTF-8 bytes."""
        content = report.content
        if isinstance(content, (bytes, bytearray, memoryview)):
            content = bytes(content).decode("utf-8")
        return cls(id=report.id, content=content, created_at=report.created_at)


class ReportListResponse(SuccessResponse):
    """Response for GET /reports."""

    data: list[ReportResponse]
    count: int = Field(..., description="Number of reports returned")


class ReportCreatedResponse(SuccessResponse):
    """Response for POST /reports."""

    data: ReportResponse
    message: str = "Report created successfully"
