"""
Base Schemas.

Standard API response schemas. Every endpoint answers with the
ApiResponse envelope; list endpoints put a ListPage inside ``data``.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from beautyslot.backend.core.utils import utc_now

DataT = TypeVar("DataT")
ItemT = TypeVar("ItemT")


class ResponseMetadata(BaseModel):
    """Metadata included in all API responses."""

    timestamp: datetime = Field(default_factory=utc_now)
    request_id: str | None = None


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class ApiResponse(BaseModel, Generic[DataT]):
    """
    Standard API response envelope.

    All API responses use this structure for consistency.
    """

    success: bool = True
    data: DataT | None = None
    error: ErrorDetail | None = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = False
    data: None = None
    error: ErrorDetail
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class ListPage(BaseModel, Generic[ItemT]):
    """Offset-paginated list payload."""

    items: list[ItemT]
    total: int
    skip: int = 0
    limit: int | None = None
    message: str | None = None


class MessageResponse(BaseModel):
    """Payload for operations that only report an outcome."""

    message: str
