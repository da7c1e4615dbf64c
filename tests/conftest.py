import logging
import sqlite3
from collections.abc import Generator
from pathlib import Path

import pytest

from sparrowsql import Sparrow

here = Path(__file__).parent
root_path = here.parent

USERS_SCHEMA = """
CREATE TABLE user (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT,
    points INTEGER NOT NULL DEFAULT 0
)
"""
USERS = [("bob", "bob@aol.com", 10), ("alice", "alice@example.com", 30), ("O'Dell", None, 20)]


@pytest.fixture
def sparrow() -> Sparrow:
    """A builder without a connection, pointed at the ``user`` table."""
    return Sparrow().from_("user")


@pytest.fixture
def sqlite_connection() -> "Generator[sqlite3.Connection, None, None]":
    connection = sqlite3.connect(":memory:", isolation_level=None)
    connection.execute(USERS_SCHEMA)
    connection.executemany("INSERT INTO user (name, email, points) VALUES (?, ?, ?)", USERS)
    try:
        yield connection
    finally:
        connection.close()


@pytest.fixture
def sqlite_sparrow(sqlite_connection: sqlite3.Connection) -> Sparrow:
    """A facade over an in-memory SQLite database seeded with three users."""
    return Sparrow(sqlite_connection).from_("user")


@pytest.fixture(autouse=True)
def _restore_library_logging() -> "Generator[None, None, None]":
    """Undo handler and propagation changes made by ``configure_logging``."""
    logger = logging.getLogger("sparrowsql")
    handlers, propagate, level = list(logger.handlers), logger.propagate, logger.level
    yield
    logger.handlers[:] = handlers
    logger.propagate = propagate
    logger.setLevel(level)
