"""Materialized view management for mvlite."""

import logging
import sqlite3
import time
import uuid
from typing import List, Optional

from mvlite.core.connection import DatabaseConnection
from mvlite.core.errors import (
    DDLError,
    NotFoundError,
    QueryError,
    SchemaDriftError,
    TransactionError,
)
from mvlite.managers.base import BaseManager
from mvlite.managers.registry import ViewRegistry
from mvlite.models import ColumnSpec, RefreshResult, ViewDefinition
from mvlite.utils import (
    InvalidNameError,
    SQLValidationError,
    quote_identifier,
    semantic_type,
    storage_class,
    validate_name,
    validate_query_safe,
)

logger = logging.getLogger(__name__)

DRIFT_RECREATE = "recreate"
DRIFT_REJECT = "reject"
DRIFT_POLICIES = (DRIFT_RECREATE, DRIFT_REJECT)


def build_create_sql(view_name: str, columns: List[ColumnSpec]) -> str:
    """Build the CREATE TABLE statement for a view's backing table."""
    column_defs = ", ".join(
        f"{quote_identifier(col.name)} {col.type}" for col in columns
    )
    return f"CREATE TABLE IF NOT EXISTS {quote_identifier(view_name)} ({column_defs})"


def build_insert_sql(view_name: str, query: str) -> str:
    """Build the INSERT ... SELECT statement that repopulates a backing table."""
    # Newlines keep a trailing line comment in the query from eating the paren
    return f"INSERT INTO {quote_identifier(view_name)} SELECT * FROM (\n{query}\n)"


class MaterializedViewManager(BaseManager):
    """Creates and refreshes materialized views backed by plain tables."""

    def __init__(
        self,
        conn: DatabaseConnection,
        registry: Optional[ViewRegistry] = None,
        on_schema_drift: str = DRIFT_RECREATE,
    ):
        """Initialize the view manager.

        Args:
            conn: Open DatabaseConnection
            registry: Registry to record definitions in (defaults to one on conn)
            on_schema_drift: "recreate" to rebuild a backing table whose columns
                no longer match its query, "reject" to raise SchemaDriftError
        """
        super().__init__(conn)
        if on_schema_drift not in DRIFT_POLICIES:
            raise ValueError(
                f"Invalid schema drift policy '{on_schema_drift}'. "
                f"Valid policies: {', '.join(DRIFT_POLICIES)}"
            )
        self.registry = registry if registry is not None else ViewRegistry(conn)
        self.on_schema_drift = on_schema_drift

    def infer_schema(self, query: str) -> List[ColumnSpec]:
        """Infer backing table columns from a query's result set.

        Each column takes the declared type SQLite reports for it; columns
        computed from expressions fall back to the storage class of their
        first non-NULL value.

        Args:
            query: Defining query

        Returns:
            Column specs in result order

        Raises:
            QueryError: If the query is not a single read statement or fails
        """
        query = self._validate_query(query)
        try:
            declared = self._declared_types(query)
            result = self.conn.query(query)
        except sqlite3.Error as e:
            raise QueryError("Failed to execute defining query", statement=query) from e

        if not result.columns:
            raise QueryError("Defining query returns no columns", statement=query)
        if len(declared) != len(result.columns):
            declared = [""] * len(result.columns)

        columns = []
        for index, name in enumerate(result.columns):
            native = declared[index]
            if not native:
                native = next(
                    (
                        storage_class(row[index])
                        for row in result.rows
                        if row[index] is not None
                    ),
                    "",
                )
            columns.append(
                ColumnSpec(name=name, native_type=native, type=semantic_type(native))
            )
        return columns

    def create_or_refresh(self, query: str, view_name: str) -> RefreshResult:
        """Create a materialized view, or refresh it if it already exists.

        The registration, the truncate and the repopulation run in a single
        transaction; on failure the backing table and the registry are left
        as they were.

        Args:
            query: Defining query
            view_name: View name, used as the backing table name

        Returns:
            RefreshResult describing the new contents

        Raises:
            InvalidNameError: If view_name fails validation
            QueryError: If the query is invalid or fails to execute
            DDLError: If the backing table cannot be created
            SchemaDriftError: If the columns changed and drift is rejected
            TransactionError: If registration or repopulation fails
        """
        started = time.time()
        self._validate_view_name(view_name)
        query = self._validate_query(query)
        columns = self.infer_schema(query)
        self._check_duplicate_columns(columns, query)

        table = quote_identifier(view_name)
        create_sql = build_create_sql(view_name, columns)
        exists = self.conn.table_exists(view_name)
        recreate = False

        if exists:
            if self.registry.get(view_name) is None:
                raise DDLError(
                    f"Table '{view_name}' exists and is not a materialized view"
                )
            existing = self.table_columns(view_name)
            recreate = self._has_drifted(existing, columns)
            if recreate and self.on_schema_drift == DRIFT_REJECT:
                raise SchemaDriftError(
                    f"Columns of view '{view_name}' no longer match its query",
                    statement=create_sql,
                )
            if not recreate:
                # Untyped columns keep the type the backing table already has
                columns = [
                    new if new.native_type else old
                    for old, new in zip(existing, columns)
                ]

        statement: Optional[str] = None
        try:
            with self.conn.transaction():
                if recreate:
                    statement = f"DROP TABLE {table}"
                    self.conn.execute(statement)
                if recreate or not exists:
                    try:
                        logger.debug(f"Creating backing table: {create_sql}")
                        self.conn.execute(create_sql)
                    except sqlite3.Error as e:
                        raise DDLError(
                            f"Failed to create backing table for view '{view_name}'",
                            statement=create_sql,
                        ) from e

                statement = None
                self.registry.record(view_name, query)

                statement = f"DELETE FROM {table}"
                self.conn.execute(statement)

                statement = build_insert_sql(view_name, query)
                logger.debug(f"Populating view: {statement}")
                rows_affected = self.conn.execute(statement).rowcount
        except DDLError:
            raise
        except Exception as e:
            logger.error(f"Refresh of view '{view_name}' failed: {e}")
            raise TransactionError(
                f"Failed to refresh view '{view_name}'; changes rolled back",
                statement=statement,
            ) from e

        duration_ms = int((time.time() - started) * 1000)
        if recreate:
            logger.info(f"Recreated backing table of view '{view_name}' after schema drift")
        logger.info(
            f"Materialized view '{view_name}' with {rows_affected} rows in {duration_ms}ms"
        )
        return RefreshResult(
            view_name=view_name,
            columns=columns,
            rows_affected=rows_affected,
            recreated=recreate,
            duration_ms=duration_ms,
        )

    def refresh(self, view_name: str) -> RefreshResult:
        """Recompute a view from its registered defining query.

        Raises:
            NotFoundError: If no definition is registered for view_name
        """
        query = self.registry.lookup_query(view_name)
        if query is None:
            raise NotFoundError(f"View '{view_name}' does not exist")
        return self.create_or_refresh(query, view_name)

    def drop(self, view_name: str) -> None:
        """Drop a view's backing table and mark its registrations deleted.

        Raises:
            NotFoundError: If no definition is registered for view_name
            TransactionError: If the drop fails; nothing is changed
        """
        if self.registry.get(view_name) is None:
            raise NotFoundError(f"View '{view_name}' does not exist")

        statement = f"DROP TABLE IF EXISTS {quote_identifier(view_name)}"
        try:
            with self.conn.transaction():
                self.conn.execute(statement)
                self.registry.soft_delete(view_name)
        except Exception as e:
            raise TransactionError(
                f"Failed to drop view '{view_name}'; changes rolled back",
                statement=statement,
            ) from e
        logger.info(f"Dropped view '{view_name}'")

    def get_view(self, view_name: str) -> ViewDefinition:
        """Get the current definition of a view.

        Raises:
            NotFoundError: If the view is not registered
        """
        definition = self.registry.get(view_name)
        if definition is None:
            raise NotFoundError(f"View '{view_name}' does not exist")
        return definition

    def list_views(self) -> List[ViewDefinition]:
        """List the current definition of every view."""
        return self.registry.list_views()

    def table_columns(self, view_name: str) -> List[ColumnSpec]:
        """Return the columns of a view's backing table as stored."""
        cursor = self.conn.execute(f"PRAGMA table_info({quote_identifier(view_name)})")
        return [
            ColumnSpec(
                name=row["name"],
                native_type=row["type"],
                type=semantic_type(row["type"]),
            )
            for row in cursor.fetchall()
        ]

    def _validate_view_name(self, view_name: str) -> None:
        validate_name(view_name, "view")
        if view_name == self.registry.table_name:
            raise InvalidNameError(
                f"'{view_name}' is the registry table and cannot be used as a view name"
            )

    def _validate_query(self, query: str) -> str:
        try:
            return validate_query_safe(query)
        except SQLValidationError as e:
            raise QueryError("Invalid defining query", statement=query) from e

    def _declared_types(self, query: str) -> List[str]:
        """Read declared result column types through a temporary probe view."""
        probe = quote_identifier(f"mvlite_probe_{uuid.uuid4().hex}")
        self.conn.execute(f"CREATE TEMP VIEW {probe} AS {query}\n")
        try:
            cursor = self.conn.execute(f"PRAGMA temp.table_info({probe})")
            return [row["type"] or "" for row in cursor.fetchall()]
        finally:
            self.conn.execute(f"DROP VIEW IF EXISTS temp.{probe}")

    def _check_duplicate_columns(self, columns: List[ColumnSpec], query: str) -> None:
        # SQLite identifiers are case-insensitive
        seen = set()
        for col in columns:
            key = col.name.lower()
            if key in seen:
                raise DDLError(
                    f"Defining query returns duplicate column '{col.name}'",
                    statement=query,
                )
            seen.add(key)

    def _has_drifted(
        self, existing: List[ColumnSpec], columns: List[ColumnSpec]
    ) -> bool:
        if [col.name for col in existing] != [col.name for col in columns]:
            return True
        # A computed column over an empty result carries no type information
        return any(
            new.native_type and new.type != old.native_type
            for old, new in zip(existing, columns)
        )
