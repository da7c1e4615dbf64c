from typing import TYPE_CHECKING, Any

from sqlglot import exp

from sparrowsql.driver._common import DriverAdapterBase, DriverKind
from sparrowsql.exceptions import ConnectionError, MissingDependencyError

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from types import ModuleType

    from sparrowsql.driver._url import ConnectionDescriptor

__all__ = ("DEFAULT_PORT", "MysqlDriver", "mysql_connection_params")

DEFAULT_PORT = 3306


def _import_connector() -> "ModuleType":
    try:
        import mysql.connector
    except ImportError as e:
        raise MissingDependencyError(package="mysql.connector", install_package="mysql") from e
    return mysql.connector


def mysql_connection_params(descriptor: "ConnectionDescriptor") -> "dict[str, Any]":
    """Keyword arguments for ``mysql.connector.connect``."""
    params: dict[str, Any] = {
        "host": descriptor.host or "localhost",
        "port": descriptor.port or DEFAULT_PORT,
        "database": descriptor.database,
        "user": descriptor.user,
        "password": descriptor.password,
    }
    return {key: value for key, value in params.items() if value is not None}


class MysqlDriver(DriverAdapterBase):
    """Adapter for MySQL connections created with mysql-connector-python."""

    __slots__ = ()

    kind = DriverKind.MYSQL
    dialect = "mysql"

    @classmethod
    def connect(cls, descriptor: "ConnectionDescriptor") -> Any:
        connector = _import_connector()
        try:
            return connector.connect(autocommit=True, use_pure=True, **mysql_connection_params(descriptor))
        except connector.Error as e:
            msg = f"MySQL connection error: {e}"
            raise ConnectionError(msg) from e

    def handle_database_exceptions(self) -> "AbstractContextManager[None]":
        """Handle mysql-connector exceptions and wrap them appropriately."""
        return self._translate(_import_connector().Error, "MySQL")

    def quote(self, value: str) -> str:
        """Quote with the connector's escape routine, as ``real_escape_string`` would."""
        converter = getattr(self.connection, "converter", None)
        if converter is None:
            return exp.Literal.string(value).sql(dialect=self.dialect)
        escaped = converter.escape(value)
        if isinstance(escaped, bytes):
            escaped = escaped.decode("utf-8")
        return f"'{escaped}'"
