"""Tests for SQLite connection management."""

import sqlite3
from datetime import datetime

import pytest

from mvlite.core.connection import DatabaseConnection, ResultSet


class TestDatabaseConnection:
    """Test database connection management."""

    def test_connection_init(self, temp_dir):
        """Test initializing a database connection."""
        db_path = temp_dir / "nested" / "test.db"
        conn = DatabaseConnection(db_path)

        assert conn.path == db_path
        assert conn._conn is not None
        assert db_path.exists()

        conn.close()

    def test_pragmas_applied(self, conn):
        """Test that the default pragmas are applied."""
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        assert conn.execute("PRAGMA synchronous").fetchone()[0] == 1  # NORMAL
        assert conn.execute("PRAGMA cache_size").fetchone()[0] == -64000
        assert conn.execute("PRAGMA temp_store").fetchone()[0] == 2  # MEMORY

    def test_custom_pragmas(self, temp_dir):
        """Test overriding the pragma set."""
        conn = DatabaseConnection(temp_dir / "test.db", pragmas={"cache_size": -2000})
        assert conn.execute("PRAGMA cache_size").fetchone()[0] == -2000
        conn.close()

    def test_memory_database(self):
        """Test opening an in-memory database."""
        with DatabaseConnection(":memory:") as conn:
            conn.execute("CREATE TABLE t (a INTEGER)")
            assert conn.table_exists("t")

    def test_query_returns_result_set(self, conn):
        """Test that query reads columns and rows in order."""
        conn.execute("CREATE TABLE t (b TEXT, a INTEGER)")
        conn.execute("INSERT INTO t VALUES (?, ?)", ("x", 1))
        conn.execute("INSERT INTO t VALUES (?, ?)", ("y", 2))

        result = conn.query("SELECT b, a FROM t ORDER BY a")

        assert isinstance(result, ResultSet)
        assert result.columns == ["b", "a"]
        assert result.rows == [("x", 1), ("y", 2)]
        assert len(result) == 2
        assert result.as_dicts()[1] == {"b": "y", "a": 2}

    def test_statements_autocommit(self, temp_dir):
        """Test that statements outside a transaction are committed immediately."""
        conn = DatabaseConnection(temp_dir / "test.db")
        conn.execute("CREATE TABLE t (a INTEGER)")
        conn.execute("INSERT INTO t VALUES (1)")
        assert not conn.in_transaction

        other = DatabaseConnection(temp_dir / "test.db")
        assert other.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 1
        other.close()
        conn.close()

    def test_transaction_commit(self, conn):
        """Test that a transaction commits on success."""
        conn.execute("CREATE TABLE t (a INTEGER)")

        with conn.transaction():
            assert conn.in_transaction
            conn.execute("INSERT INTO t VALUES (1)")
            conn.execute("INSERT INTO t VALUES (2)")

        assert not conn.in_transaction
        assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 2

    def test_transaction_rollback(self, conn):
        """Test that a transaction rolls back everything, DDL included."""
        conn.execute("CREATE TABLE t (a INTEGER)")
        conn.execute("INSERT INTO t VALUES (1)")

        with pytest.raises(sqlite3.OperationalError):
            with conn.transaction():
                conn.execute("DELETE FROM t")
                conn.execute("CREATE TABLE u (b TEXT)")
                conn.execute("INSERT INTO missing VALUES (1)")

        assert not conn.in_transaction
        assert conn.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 1
        assert not conn.table_exists("u")

    def test_datetime_round_trip(self, conn):
        """Test the TIMESTAMP adapter and converter."""
        conn.execute("CREATE TABLE t (at TIMESTAMP)")
        now = datetime(2024, 1, 2, 3, 4, 5)
        conn.execute("INSERT INTO t VALUES (?)", (now,))

        assert conn.execute("SELECT at FROM t").fetchone()[0] == now

    def test_non_iso_timestamp_values(self, conn):
        """Test that TIMESTAMP values that are not ISO text are returned as stored."""
        conn.execute("CREATE TABLE t (id INTEGER, at TIMESTAMP)")
        conn.execute("INSERT INTO t VALUES (1, 1700000000)")
        conn.execute("INSERT INTO t VALUES (2, 'yesterday')")

        rows = conn.query("SELECT at FROM t ORDER BY id").rows

        assert rows == [("1700000000",), ("yesterday",)]

    def test_closed_connection(self, temp_dir):
        """Test that a closed connection refuses work."""
        conn = DatabaseConnection(temp_dir / "test.db")
        conn.close()

        with pytest.raises(RuntimeError, match="closed"):
            conn.execute("SELECT 1")
        with pytest.raises(RuntimeError, match="closed"):
            with conn.transaction():
                pass
