import sqlite3
from typing import TYPE_CHECKING, Any, Optional, TypedDict

from typing_extensions import NotRequired

from sparrowsql.driver._common import DriverAdapterBase, DriverKind
from sparrowsql.exceptions import ConnectionError

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from sparrowsql.driver._url import ConnectionDescriptor

__all__ = ("SqliteConnectionParams", "SqliteDriver", "sqlite_connection_params")


class SqliteConnectionParams(TypedDict, total=False):
    """SQLite connection parameters."""

    database: str
    timeout: NotRequired[float]
    isolation_level: "NotRequired[Optional[str]]"
    check_same_thread: NotRequired[bool]
    uri: NotRequired[bool]


def sqlite_connection_params(descriptor: "ConnectionDescriptor") -> SqliteConnectionParams:
    """Connection parameters for ``descriptor``.

    Connections opened by sparrowsql run in autocommit mode; ``file:`` paths
    enable URI handling.
    """
    database = descriptor.database or descriptor.host or ":memory:"
    params: SqliteConnectionParams = {"database": database, "isolation_level": None}
    if database.startswith("file:"):
        params["uri"] = True
    return params


class SqliteDriver(DriverAdapterBase):
    """Adapter for the standard library ``sqlite3`` client."""

    __slots__ = ()

    kind = DriverKind.SQLITE
    dialect = "sqlite"

    @classmethod
    def connect(cls, descriptor: "ConnectionDescriptor") -> sqlite3.Connection:
        params = sqlite_connection_params(descriptor)
        try:
            return sqlite3.connect(**params)
        except sqlite3.Error as e:
            msg = f"SQLite connection error: {e}"
            raise ConnectionError(msg) from e

    def handle_database_exceptions(self) -> "AbstractContextManager[None]":
        """Handle SQLite-specific exceptions and wrap them appropriately."""
        return self._translate(sqlite3.Error, "SQLite")

    def _last_insert_id(self, cursor: Any) -> Any:
        return cursor.lastrowid
