"""SQLite adapter for sparrowsql."""

from sparrowsql.adapters.sqlite.driver import SqliteConnectionParams, SqliteDriver, sqlite_connection_params

__all__ = ("SqliteConnectionParams", "SqliteDriver", "sqlite_connection_params")
