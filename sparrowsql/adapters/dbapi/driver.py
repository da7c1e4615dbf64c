import sys
from typing import TYPE_CHECKING, Any, Final, Optional

from sparrowsql.driver._common import DriverAdapterBase, DriverKind
from sparrowsql.exceptions import ImproperConfigurationError

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from sparrowsql.driver._url import ConnectionDescriptor

__all__ = ("PDO_DIALECTS", "DbapiDriver")

PDO_DIALECTS: Final[dict[str, str]] = {"pdosqlite": "sqlite", "pdopgsql": "postgres", "pdomysql": "mysql"}


class DbapiDriver(DriverAdapterBase):
    """Adapter for any PEP 249 connection.

    ``pdo*`` connection strings open a native client connection and drive it
    through the plain DB-API surface only. Live handles of unknown libraries
    are wrapped as they are.
    """

    __slots__ = ("_dialect",)

    kind = DriverKind.DBAPI

    def __init__(self, connection: Any, dialect: Optional[str] = None) -> None:
        super().__init__(connection)
        self._dialect = dialect

    @classmethod
    def connect(cls, descriptor: "ConnectionDescriptor") -> Any:
        if descriptor.kind == "pdosqlite":
            from sparrowsql.adapters.sqlite import SqliteDriver

            return SqliteDriver.connect(descriptor)
        if descriptor.kind == "pdopgsql":
            from sparrowsql.adapters.psycopg import PsycopgDriver

            return PsycopgDriver.connect(descriptor)
        if descriptor.kind == "pdomysql":
            from sparrowsql.adapters.mysql import MysqlDriver

            return MysqlDriver.connect(descriptor)
        msg = f"Invalid type {descriptor.kind}."
        raise ImproperConfigurationError(msg)

    @classmethod
    def from_descriptor(cls, descriptor: "ConnectionDescriptor") -> "DriverAdapterBase":
        driver = super().from_descriptor(descriptor)
        if isinstance(driver, DbapiDriver):
            driver._dialect = PDO_DIALECTS.get(descriptor.kind)
        return driver

    def handle_database_exceptions(self) -> "AbstractContextManager[None]":
        """Wrap errors raised by the connection's own DB-API module."""
        return self._translate(_native_error_type(self.connection), "DB-API")

    @property
    def sql_dialect(self) -> Optional[str]:
        return self._dialect


def _native_error_type(connection: Any) -> "type[Exception]":
    """Locate the ``Error`` class of the connection's driver module.

    The module path of the connection's type is searched from the innermost
    module outwards, so a ``mysql.connector`` handle finds the connector's
    ``Error`` rather than stopping at the bare ``mysql`` namespace package.
    """
    parts = type(connection).__module__.split(".")
    for depth in range(len(parts), 0, -1):
        error = getattr(sys.modules.get(".".join(parts[:depth])), "Error", None)
        if isinstance(error, type) and issubclass(error, Exception):
            return error
    error = getattr(connection, "Error", None)
    if isinstance(error, type) and issubclass(error, Exception):
        return error
    return Exception
