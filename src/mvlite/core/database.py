"""Unified interface for mvlite operations."""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from mvlite.config import Config
from mvlite.core.connection import DatabaseConnection, ResultSet
from mvlite.managers.materialized import MaterializedViewManager, DRIFT_RECREATE
from mvlite.managers.registry import ViewRegistry, DEFAULT_REGISTRY_TABLE
from mvlite.models import RefreshResult, ViewDefinition


class MatViewDB:
    """A SQLite database with materialized view support.

    Examples:
        db = MatViewDB("app.db")
        db.create_view("recent_events", "SELECT * FROM events ORDER BY id DESC LIMIT 5")
        db.refresh("recent_events")
        rows = db.query("SELECT * FROM recent_events")
    """

    def __init__(
        self,
        database_path: Union[str, Path],
        registry_table: str = DEFAULT_REGISTRY_TABLE,
        on_schema_drift: str = DRIFT_RECREATE,
        pragmas: Optional[Dict[str, Any]] = None,
        timeout: float = 30.0,
    ):
        """Open the database and make sure the registry table exists.

        Args:
            database_path: SQLite file path or ``:memory:``
            registry_table: Name of the registry table
            on_schema_drift: "recreate" or "reject"
            pragmas: PRAGMA settings for the connection
            timeout: Seconds to wait on a locked database
        """
        self.conn = DatabaseConnection(database_path, pragmas=pragmas, timeout=timeout)
        try:
            self.registry = ViewRegistry(self.conn, registry_table)
            self.registry.ensure_schema()
            self.views = MaterializedViewManager(
                self.conn, self.registry, on_schema_drift=on_schema_drift
            )
        except Exception:
            self.conn.close()
            raise

    @classmethod
    def from_config(cls, config: Config) -> "MatViewDB":
        """Open the database described by a project configuration."""
        data = config.load()
        return cls(
            config.database_file(data),
            registry_table=data.registry_table,
            on_schema_drift=data.on_schema_drift,
            pragmas=data.pragmas,
            timeout=data.busy_timeout,
        )

    def create_view(self, name: str, query: str) -> RefreshResult:
        """Create or refresh a materialized view from a query."""
        return self.views.create_or_refresh(query, name)

    def refresh(self, name: str) -> RefreshResult:
        """Refresh a materialized view from its registered query."""
        return self.views.refresh(name)

    def drop(self, name: str) -> None:
        """Drop a materialized view."""
        self.views.drop(name)

    def list_views(self) -> List[ViewDefinition]:
        """List registered views."""
        return self.views.list_views()

    def query(self, sql: str, params: Optional[tuple] = None) -> ResultSet:
        """Run a query and return its full result set."""
        return self.conn.query(sql, params)

    def close(self) -> None:
        """Close the underlying connection."""
        self.conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _ = (exc_type, exc_val, exc_tb)
        self.close()
        return False


def connect(database_path: Union[str, Path], **options: Any) -> MatViewDB:
    """Open a database with materialized view support.

    Args:
        database_path: SQLite file path or ``:memory:``
        **options: Passed through to MatViewDB

    Returns:
        MatViewDB instance

    Examples:
        with connect("app.db") as db:
            db.create_view("big_spenders", "SELECT user_id, SUM(amount) AS total FROM events GROUP BY user_id")
    """
    return MatViewDB(database_path, **options)
