"""Durable registry of materialized view definitions."""

import logging
import sqlite3
from typing import List, Optional

from mvlite.core.connection import DatabaseConnection
from mvlite.core.errors import StoreError
from mvlite.managers.base import BaseManager
from mvlite.models import ViewDefinition
from mvlite.utils import validate_name, quote_identifier

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_TABLE = "materialized_views"

_COLUMNS = "id, name, query, created_at, updated_at, deleted_at"


class ViewRegistry(BaseManager):
    """Maps view names to their defining queries.

    Registrations are append-only: every ``register`` adds a row, and lookups
    resolve a name to its most recently registered row that has not been
    dropped ("latest wins"). Write methods never open a transaction of their
    own, so a caller can group them with other statements.
    """

    def __init__(
        self, conn: DatabaseConnection, table_name: str = DEFAULT_REGISTRY_TABLE
    ):
        """Initialize the registry.

        Args:
            conn: Open DatabaseConnection
            table_name: Name of the registry table

        Raises:
            InvalidNameError: If table_name is not a valid table name
        """
        super().__init__(conn)
        validate_name(table_name, "table")
        self.table_name = table_name
        self._table = quote_identifier(table_name)

    def ensure_schema(self) -> None:
        """Create the registry table and its lookup index if absent.

        Raises:
            StoreError: If the DDL fails
        """
        index = quote_identifier(f"idx_{self.table_name}_name")
        try:
            with self.conn.transaction():
                self.conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {self._table} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        query TEXT NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        deleted_at TIMESTAMP
                    )
                    """
                )
                self.conn.execute(
                    f"CREATE INDEX IF NOT EXISTS {index} ON {self._table} (name, id)"
                )
        except sqlite3.Error as e:
            raise StoreError(
                f"Failed to prepare registry table '{self.table_name}'"
            ) from e

    def register(self, name: str, query: str) -> ViewDefinition:
        """Append a new registration for a view.

        No duplicate check is made; an earlier registration of the same name
        stays in the history and is shadowed by this one.

        Args:
            name: View name
            query: Defining query text

        Returns:
            The stored ViewDefinition
        """
        try:
            cursor = self.conn.execute(
                f"INSERT INTO {self._table} (name, query) VALUES (?, ?)",
                (name, query),
            )
            definition = self._fetch_by_id(cursor.lastrowid)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to register view '{name}'") from e

        logger.debug(f"Registered view '{name}' as version {definition.id}")
        return definition

    def record(self, name: str, query: str) -> ViewDefinition:
        """Make ``query`` the current definition of ``name``.

        If the latest active registration already holds this exact query only
        its ``updated_at`` is bumped; otherwise a new registration is appended.

        Returns:
            The current ViewDefinition
        """
        latest = self.get(name)
        if latest is None or latest.query != query:
            return self.register(name, query)

        try:
            self.conn.execute(
                f"UPDATE {self._table} SET updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (latest.id,),
            )
            return self._fetch_by_id(latest.id)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to update registration of view '{name}'") from e

    def get(self, name: str) -> Optional[ViewDefinition]:
        """Get the current definition of a view.

        Args:
            name: View name

        Returns:
            Latest active ViewDefinition, or None if the view is not registered
        """
        try:
            cursor = self.conn.execute(
                f"""
                SELECT {_COLUMNS} FROM {self._table}
                WHERE name = ? AND deleted_at IS NULL
                ORDER BY id DESC
                LIMIT 1
                """,
                (name,),
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to look up view '{name}'") from e

        return ViewDefinition(**dict(row)) if row else None

    def lookup_query(self, name: str) -> Optional[str]:
        """Return the current defining query of a view, or None if not found."""
        definition = self.get(name)
        return definition.query if definition else None

    def history(self, name: str) -> List[ViewDefinition]:
        """Return every active registration of a view, oldest first."""
        try:
            cursor = self.conn.execute(
                f"""
                SELECT {_COLUMNS} FROM {self._table}
                WHERE name = ? AND deleted_at IS NULL
                ORDER BY id
                """,
                (name,),
            )
            return [ViewDefinition(**dict(row)) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read history of view '{name}'") from e

    def list_views(self) -> List[ViewDefinition]:
        """List the current definition of every registered view, by name."""
        try:
            cursor = self.conn.execute(
                f"""
                SELECT {_COLUMNS} FROM {self._table} AS r
                WHERE deleted_at IS NULL
                AND id = (
                    SELECT MAX(id) FROM {self._table}
                    WHERE name = r.name AND deleted_at IS NULL
                )
                ORDER BY name
                """
            )
            return [ViewDefinition(**dict(row)) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StoreError("Failed to list views") from e

    def soft_delete(self, name: str) -> int:
        """Mark every active registration of a view as deleted.

        Returns:
            Number of registrations marked
        """
        try:
            cursor = self.conn.execute(
                f"""
                UPDATE {self._table}
                SET deleted_at = CURRENT_TIMESTAMP, updated_at = CURRENT_TIMESTAMP
                WHERE name = ? AND deleted_at IS NULL
                """,
                (name,),
            )
        except sqlite3.Error as e:
            raise StoreError(f"Failed to delete view '{name}'") from e
        return cursor.rowcount

    def _fetch_by_id(self, row_id: int) -> ViewDefinition:
        cursor = self.conn.execute(
            f"SELECT {_COLUMNS} FROM {self._table} WHERE id = ?", (row_id,)
        )
        return ViewDefinition(**dict(cursor.fetchone()))
