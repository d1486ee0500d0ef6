"""Utility modules for mvlite."""

from mvlite.utils.sql_validator import (
    validate_sql_query,
    validate_query_safe,
    normalize_query,
    SQLValidationError,
    SQLOperation,
)
from mvlite.utils.name_validator import (
    validate_name,
    is_valid_name,
    quote_identifier,
    InvalidNameError,
)
from mvlite.utils.type_utils import semantic_type, storage_class

__all__ = [
    "validate_sql_query",
    "validate_query_safe",
    "normalize_query",
    "SQLValidationError",
    "SQLOperation",
    "validate_name",
    "is_valid_name",
    "quote_identifier",
    "InvalidNameError",
    "semantic_type",
    "storage_class",
]
