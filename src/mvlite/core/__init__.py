"""Core mvlite functionality."""

from mvlite.core.database import MatViewDB, connect
from mvlite.core.connection import DatabaseConnection, ResultSet

__all__ = ["MatViewDB", "connect", "DatabaseConnection", "ResultSet"]
