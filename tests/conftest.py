"""Pytest configuration and shared fixtures."""

import shutil
import tempfile
from pathlib import Path

import pytest

from mvlite.core.connection import DatabaseConnection
from mvlite.managers import MaterializedViewManager, ViewRegistry


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp)


@pytest.fixture
def conn(temp_dir):
    """Open a connection to a fresh database file."""
    conn = DatabaseConnection(temp_dir / "test.db")
    yield conn
    conn.close()


@pytest.fixture
def registry(conn):
    """Registry with its table created."""
    registry = ViewRegistry(conn)
    registry.ensure_schema()
    return registry


@pytest.fixture
def manager(conn, registry):
    """View manager sharing the test connection and registry."""
    return MaterializedViewManager(conn, registry)


@pytest.fixture
def source(conn):
    """Source table holding ids 1..100."""
    conn.execute(
        """
        CREATE TABLE source (
            id INTEGER PRIMARY KEY,
            amount INTEGER NOT NULL,
            price REAL,
            category TEXT,
            payload BLOB
        )
        """
    )
    with conn.transaction():
        conn.executemany(
            "INSERT INTO source (id, amount, price, category, payload) VALUES (?, ?, ?, ?, ?)",
            [
                (i, i * 10, i / 2, "income" if i % 2 else "expense", bytes([i]))
                for i in range(1, 101)
            ],
        )
    return "source"
