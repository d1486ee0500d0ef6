"""Sample cash-flow event table used by the demo command and tests."""

import random
from datetime import datetime, timedelta
from typing import Optional

from mvlite.core.connection import DatabaseConnection
from mvlite.utils import quote_identifier, validate_name

DEFAULT_EVENTS_TABLE = "cash_flow_events"

DEMO_QUERY = (
    "SELECT id, amount, category, user_id FROM cash_flow_events "
    "ORDER BY id DESC LIMIT 5"
)


def ensure_events_table(
    conn: DatabaseConnection, table: str = DEFAULT_EVENTS_TABLE
) -> None:
    """Create the events table if it doesn't exist."""
    validate_name(table, "table")
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {quote_identifier(table)} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            amount INTEGER NOT NULL,
            date TIMESTAMP NOT NULL,
            category TEXT NOT NULL,   -- income / expense
            necessity TEXT NOT NULL,  -- need / want
            description TEXT,
            user_id INTEGER NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            deleted_at TIMESTAMP
        )
        """
    )


def seed_events(
    conn: DatabaseConnection,
    target: int = 1000,
    table: str = DEFAULT_EVENTS_TABLE,
    seed: Optional[int] = None,
) -> int:
    """Top up the events table with random rows until it holds ``target`` rows.

    Args:
        conn: Open connection
        target: Desired row count
        table: Events table name
        seed: Optional random seed for reproducible data

    Returns:
        Number of rows inserted
    """
    ensure_events_table(conn, table)
    quoted = quote_identifier(table)
    count = conn.execute(f"SELECT COUNT(*) FROM {quoted}").fetchone()[0]
    missing = max(target - count, 0)
    if not missing:
        return 0

    rng = random.Random(seed)
    now = datetime.now()
    rows = [
        (
            rng.randrange(10000),
            now + timedelta(days=rng.randrange(30)),
            rng.choice(("income", "expense")),
            rng.choice(("need", "want")),
            "description",
            rng.randrange(100),
        )
        for _ in range(missing)
    ]
    with conn.transaction():
        conn.executemany(
            f"""
            INSERT INTO {quoted} (amount, date, category, necessity, description, user_id)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
    return missing
