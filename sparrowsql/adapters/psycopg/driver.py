from typing import TYPE_CHECKING, Any

from sparrowsql.driver._common import DriverAdapterBase, DriverKind
from sparrowsql.exceptions import ConnectionError, MissingDependencyError

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from types import ModuleType

    from sparrowsql.driver._url import ConnectionDescriptor

__all__ = ("DEFAULT_PORT", "PsycopgDriver", "psycopg_connection_params")

DEFAULT_PORT = 5432


def _import_psycopg() -> "ModuleType":
    try:
        import psycopg
    except ImportError as e:
        raise MissingDependencyError(package="psycopg", install_package="psycopg") from e
    return psycopg


def psycopg_connection_params(descriptor: "ConnectionDescriptor") -> "dict[str, Any]":
    """Keyword arguments for ``psycopg.connect``; unset fields are left to libpq defaults."""
    params: dict[str, Any] = {
        "host": descriptor.host,
        "port": descriptor.port or DEFAULT_PORT,
        "dbname": descriptor.database,
        "user": descriptor.user,
        "password": descriptor.password,
    }
    return {key: value for key, value in params.items() if value is not None}


class PsycopgDriver(DriverAdapterBase):
    """Adapter for PostgreSQL connections created with psycopg 3."""

    __slots__ = ()

    kind = DriverKind.PGSQL
    dialect = "postgres"

    @classmethod
    def connect(cls, descriptor: "ConnectionDescriptor") -> Any:
        psycopg = _import_psycopg()
        try:
            return psycopg.connect(autocommit=True, **psycopg_connection_params(descriptor))
        except psycopg.Error as e:
            msg = f"PostgreSQL connection error: {e}"
            raise ConnectionError(msg) from e

    def handle_database_exceptions(self) -> "AbstractContextManager[None]":
        """Handle psycopg exceptions and wrap them appropriately."""
        return self._translate(_import_psycopg().Error, "PostgreSQL")

    def _last_insert_id(self, cursor: Any) -> Any:
        # psycopg exposes no insert id; use RETURNING to read generated keys.
        return None

    def quote(self, value: str) -> str:
        """Quote with the server's own escaping rules."""
        from psycopg import sql

        return sql.Literal(value).as_string(self.connection)
