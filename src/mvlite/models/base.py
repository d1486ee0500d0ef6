"""Base models for mvlite."""

from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, field_serializer


class MvliteRecordModel(BaseModel):
    """Base model for entities stored as rows in mvlite's own tables.

    Includes the store-assigned id and timestamp fields.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, dt: Optional[datetime], _info: Any) -> Optional[str]:
        """Serialize datetime to ISO format."""
        return dt.isoformat() if dt else None


class MvliteBaseModel(BaseModel):
    """Base model for non-record entities (schemas, results, config)."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        extra="forbid",
    )
