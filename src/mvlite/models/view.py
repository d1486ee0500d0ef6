"""Materialized view models for mvlite."""

from datetime import datetime
from typing import List, Literal, Optional
from pydantic import Field

from .base import MvliteBaseModel, MvliteRecordModel


SemanticType = Literal["INTEGER", "REAL", "TEXT", "BLOB"]


class ViewDefinition(MvliteRecordModel):
    """One registration of a view's defining query."""

    name: str = Field(description="View name, also the backing table name")
    query: str = Field(description="SQL query that defines the view")
    deleted_at: Optional[datetime] = Field(
        default=None, description="Set when the view has been dropped"
    )

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


class ColumnSpec(MvliteBaseModel):
    """An inferred backing table column."""

    name: str = Field(description="Column name as reported by the result set")
    native_type: str = Field(
        default="", description="Declared type or storage class seen in the result"
    )
    type: SemanticType = Field(description="Storage type used in the backing table")


class RefreshResult(MvliteBaseModel):
    """Outcome of a create or refresh."""

    view_name: str
    columns: List[ColumnSpec] = Field(default_factory=list)
    rows_affected: int = 0
    recreated: bool = Field(
        default=False, description="Backing table was rebuilt due to schema drift"
    )
    duration_ms: int = 0
