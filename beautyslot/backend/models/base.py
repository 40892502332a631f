"""
Base Model.

Base class for all in-memory domain models with common fields.
Models are pydantic so stores can hand them straight to response schemas.
"""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from beautyslot.backend.core.utils import utc_now


class Base(BaseModel):
    """Base class for stored models. Mutable, validated on assignment."""

    model_config = ConfigDict(validate_assignment=True)


class TimestampMixin(BaseModel):
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def touch(self) -> None:
        """Refresh updated_at."""
        self.updated_at = utc_now()


class UUIDMixin(BaseModel):
    """Mixin that adds a UUID string primary key."""

    id: str = Field(default_factory=lambda: str(uuid4()))
