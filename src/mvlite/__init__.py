"""mvlite - Materialized views for SQLite."""

from importlib.metadata import version, PackageNotFoundError

from mvlite.core.database import MatViewDB, connect
from mvlite.core.errors import (
    MaterializedViewError,
    StoreError,
    QueryError,
    DDLError,
    SchemaDriftError,
    TransactionError,
    NotFoundError,
)
from mvlite.managers import MaterializedViewManager, ViewRegistry

try:
    __version__ = version("mvlite")
except PackageNotFoundError:
    # Package metadata is not available when running from a source checkout
    __version__ = "0.1.0"

__all__ = [
    "MatViewDB",
    "connect",
    "MaterializedViewManager",
    "ViewRegistry",
    "MaterializedViewError",
    "StoreError",
    "QueryError",
    "DDLError",
    "SchemaDriftError",
    "TransactionError",
    "NotFoundError",
]
