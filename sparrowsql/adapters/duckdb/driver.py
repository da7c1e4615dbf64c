from typing import TYPE_CHECKING, Any

from sparrowsql.driver._common import (
    DriverAdapterBase,
    DriverKind,
    ExecutionResult,
    is_modifying_statement,
    normalize_rows,
)
from sparrowsql.exceptions import ConnectionError, MissingDependencyError

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from types import ModuleType

    from sparrowsql.driver._url import ConnectionDescriptor

__all__ = ("DuckDBDriver",)


def _import_duckdb() -> "ModuleType":
    try:
        import duckdb
    except ImportError as e:
        raise MissingDependencyError(package="duckdb") from e
    return duckdb


class DuckDBDriver(DriverAdapterBase):
    """Adapter for embedded DuckDB databases."""

    __slots__ = ()

    kind = DriverKind.DUCKDB
    dialect = "duckdb"

    @classmethod
    def connect(cls, descriptor: "ConnectionDescriptor") -> Any:
        duckdb = _import_duckdb()
        try:
            return duckdb.connect(database=descriptor.database or descriptor.host or ":memory:")
        except duckdb.Error as e:
            msg = f"DuckDB connection error: {e}"
            raise ConnectionError(msg) from e

    def handle_database_exceptions(self) -> "AbstractContextManager[None]":
        """Handle DuckDB-specific exceptions and wrap them appropriately."""
        return self._translate(_import_duckdb().Error, "DuckDB")

    def _execute_statement(self, cursor: Any, sql: str) -> ExecutionResult:
        """DuckDB reports DML row counts as a one-row ``Count`` result."""
        cursor.execute(sql)
        if is_modifying_statement(sql, self.dialect):
            result = cursor.fetchone()
            row_count = int(result[0]) if result and len(result) == 1 else 0
            return ExecutionResult([], row_count, None, None, False)
        if cursor.description:
            column_names = [col[0] for col in cursor.description]
            data = normalize_rows(column_names, cursor.fetchall())
            return ExecutionResult(data, 0, None, len(data), True)
        return ExecutionResult([], 0, None, None, False)
