"""SQLite connection management for mvlite."""

import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, List, Any, Iterator, Tuple, Union
from contextlib import contextmanager
from datetime import datetime

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

DEFAULT_PRAGMAS: Dict[str, Any] = {
    "journal_mode": "WAL",
    "synchronous": "NORMAL",
    "cache_size": -64000,
    "temp_store": "MEMORY",
    "foreign_keys": "ON",
}


# Custom datetime adapter and converter for SQLite
def adapt_datetime(dt):
    """Convert datetime to ISO 8601 string."""
    return dt.isoformat()


def convert_datetime(val):
    """Convert ISO 8601 string to datetime.

    SQLite does not enforce declared types, so a TIMESTAMP column may hold
    epoch numbers or free text; those come back as the stored text.
    """
    text = val.decode()
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return text


# Register the adapter and converter
sqlite3.register_adapter(datetime, adapt_datetime)
sqlite3.register_converter("TIMESTAMP", convert_datetime)
sqlite3.register_converter("DATETIME", convert_datetime)


@dataclass
class ResultSet:
    """A fully read query result: ordered column names and row tuples."""

    columns: List[str]
    rows: List[Tuple[Any, ...]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Tuple[Any, ...]]:
        return iter(self.rows)

    def as_dicts(self) -> List[Dict[str, Any]]:
        """Return rows as dictionaries keyed by column name."""
        return [dict(zip(self.columns, row)) for row in self.rows]


class DatabaseConnection:
    """Manages a SQLite database connection with explicit transactions.

    The underlying connection runs in autocommit mode; the only way to group
    statements is :meth:`transaction`, which always ends in COMMIT or
    ROLLBACK.
    """

    def __init__(
        self,
        path: Union[str, Path],
        pragmas: Optional[Dict[str, Any]] = None,
        timeout: float = 30.0,
    ):
        """Initialize database connection.

        Args:
            path: Path to SQLite database file, or ``:memory:``
            pragmas: PRAGMA settings applied on connect (defaults to DEFAULT_PRAGMAS)
            timeout: Seconds to wait on a locked database
        """
        self.path = path if str(path) == MEMORY_PATH else Path(path)
        self.pragmas = dict(DEFAULT_PRAGMAS if pragmas is None else pragmas)
        self.timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None
        self._connect()

    def _connect(self) -> None:
        """Establish database connection and apply pragmas."""
        if isinstance(self.path, Path):
            self.path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(
            str(self.path),
            timeout=self.timeout,
            isolation_level=None,
            detect_types=sqlite3.PARSE_DECLTYPES,
        )

        try:
            for name, value in self.pragmas.items():
                self._conn.execute(f"PRAGMA {name} = {value}")
        except sqlite3.Error:
            self._conn.close()
            self._conn = None
            raise

        self._conn.row_factory = sqlite3.Row
        logger.debug(f"Opened {self.path} with pragmas {self.pragmas}")

    @property
    def in_transaction(self) -> bool:
        """True while a transaction opened by :meth:`transaction` is active."""
        return bool(self._conn and self._conn.in_transaction)

    def execute(self, sql: str, params: Optional[tuple] = None) -> sqlite3.Cursor:
        """Execute a SQL statement.

        Args:
            sql: SQL statement to execute
            params: Optional parameters for parameterized queries

        Returns:
            Cursor with results
        """
        if not self._conn:
            raise RuntimeError("Connection is closed")

        if params:
            return self._conn.execute(sql, params)
        return self._conn.execute(sql)

    def executemany(self, sql: str, params: List[tuple]) -> sqlite3.Cursor:
        """Execute a SQL statement multiple times with different parameters.

        Args:
            sql: SQL statement to execute
            params: List of parameter tuples

        Returns:
            Cursor
        """
        if not self._conn:
            raise RuntimeError("Connection is closed")

        return self._conn.executemany(sql, params)

    def query(self, sql: str, params: Optional[tuple] = None) -> ResultSet:
        """Run a query and read its full result set.

        Args:
            sql: Query to run
            params: Optional query parameters

        Returns:
            ResultSet with column names in result order
        """
        cursor = self.execute(sql, params)
        try:
            columns = [desc[0] for desc in cursor.description or ()]
            rows = [tuple(row) for row in cursor.fetchall()]
        finally:
            cursor.close()
        return ResultSet(columns=columns, rows=rows)

    def table_exists(self, name: str) -> bool:
        """Check whether a table with this exact name exists in the main schema."""
        cursor = self.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (name,),
        )
        return cursor.fetchone() is not None

    @contextmanager
    def transaction(self):
        """Context manager for database transactions.

        Automatically commits on success or rolls back on exception.
        """
        if not self._conn:
            raise RuntimeError("Connection is closed")

        self._conn.execute("BEGIN")
        try:
            yield self
            self._conn.commit()
        except BaseException:
            self._conn.rollback()
            raise

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager."""
        # Parameters are required by context manager protocol but not used
        _ = (exc_type, exc_val, exc_tb)
        self.close()
        return False
