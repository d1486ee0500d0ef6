"""Core data models for mvlite."""

from .base import MvliteBaseModel, MvliteRecordModel
from .view import ViewDefinition, ColumnSpec, RefreshResult, SemanticType

__all__ = [
    "MvliteBaseModel",
    "MvliteRecordModel",
    "ViewDefinition",
    "ColumnSpec",
    "RefreshResult",
    "SemanticType",
]
