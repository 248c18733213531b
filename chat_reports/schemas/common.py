"""Response envelope shared by every endpoint."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes snake_case fields as camelCase (``created_at`` -> ``createdAt``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuccessResponse(CamelModel):
    """Base for ``{success: true, data, message?, count?}`` responses."""

    success: bool = True


class ErrorResponse(CamelModel):
    """Failure envelope: ``{success: false, error, retryAfter?, details?}``."""

    success: bool = False
    error: str = Field(..., description="Human readable error message")
    retry_after: Optional[str] = Field(None, description="Retry guidance for rate-limited requests")
    details: Optional[str] = Field(None, description="Error detail, development only")

    def to_content(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
