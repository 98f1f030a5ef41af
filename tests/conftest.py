import sqlite3

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.metrics.noop import NoOpMetrics


@pytest.fixture
def metrics():
    return NoOpMetrics()


@pytest.fixture
def sqlite_db():
    """In-memory SQLite adapter with a small `users` table."""
    conn = sqlite3.connect(":memory:", isolation_level=None)
    conn.executescript(
        """
        CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, status TEXT);
        INSERT INTO users (id, name, status) VALUES (1, 'Alice', 'active');
        INSERT INTO users (id, name, status) VALUES (2, 'Bob', 'inactive');
        INSERT INTO users (id, name, status) VALUES (3, 'Claire', 'active');
        INSERT INTO users (id, name, status) VALUES (4, 'Diego', 'active');
        """
    )
    adapter = SQLiteAdapter(conn)
    try:
        yield adapter
    finally:
        conn.close()
