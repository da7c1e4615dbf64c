"""Shared driver primitives: backend kinds, execution results and the adapter base."""

import contextlib
import datetime
import uuid
from abc import ABC, abstractmethod
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, NamedTuple, Optional

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from sparrowsql.exceptions import ExecutionError
from sparrowsql.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence
    from contextlib import AbstractContextManager

    from sparrowsql.driver._url import ConnectionDescriptor
    from sparrowsql.typing import DictRow

__all__ = (
    "DBAPICursor",
    "DriverAdapterBase",
    "DriverKind",
    "ExecutionResult",
    "is_insert_statement",
    "is_modifying_statement",
    "normalize_rows",
    "normalize_value",
    "resolve_rowcount",
)

logger = get_logger("driver")


class DriverKind(str, Enum):
    """Closed set of supported backends."""

    SQLITE = "sqlite"
    PGSQL = "pgsql"
    MYSQL = "mysql"
    DUCKDB = "duckdb"
    DBAPI = "dbapi"

    def __str__(self) -> str:
        return self.value


class ExecutionResult(NamedTuple):
    """Normalized outcome of one executed statement."""

    rows: "list[DictRow]"
    rows_affected: int
    last_insert_id: Any
    num_rows: Optional[int]
    returns_rows: bool


def normalize_value(value: Any) -> Any:
    """Coerce a native column value into a portable scalar."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    return value


def normalize_rows(column_names: "Sequence[str]", fetched: "Sequence[Any]") -> "list[DictRow]":
    """Turn fetched tuples into dictionaries keyed in select-list order."""
    return [
        {name: normalize_value(value) for name, value in zip(column_names, row)}
        for row in fetched
    ]


def is_modifying_statement(sql: str, dialect: Optional[str] = None) -> bool:
    """Check whether ``sql`` is an INSERT, UPDATE or DELETE without a RETURNING clause."""
    try:
        expression = sqlglot.parse_one(sql, read=dialect)
    except SqlglotError:
        return sql.strip().upper().startswith(("INSERT", "UPDATE", "DELETE"))
    return isinstance(expression, (exp.Insert, exp.Update, exp.Delete)) and not expression.args.get("returning")


def is_insert_statement(sql: str, dialect: Optional[str] = None) -> bool:
    """Check whether ``sql`` is an INSERT or REPLACE, the only statements that generate a row id."""
    if sql.lstrip().upper().startswith("REPLACE"):
        return True
    try:
        expression = sqlglot.parse_one(sql, read=dialect)
    except SqlglotError:
        return sql.lstrip().upper().startswith("INSERT")
    return isinstance(expression, exp.Insert)


def resolve_rowcount(cursor: Any) -> int:
    """Return the cursor's row count, or ``0`` when the driver cannot report one."""
    rowcount = getattr(cursor, "rowcount", None)
    if rowcount is None or rowcount < 0:
        return 0
    return int(rowcount)


class DBAPICursor:
    """Context manager for DB-API cursor management."""

    __slots__ = ("connection", "cursor")

    def __init__(self, connection: Any) -> None:
        self.connection = connection
        self.cursor: Optional[Any] = None

    def __enter__(self) -> Any:
        self.cursor = self.connection.cursor()
        return self.cursor

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.cursor is not None:
            with contextlib.suppress(Exception):
                self.cursor.close()


class DriverAdapterBase(ABC):
    """Capability set every backend adapter provides.

    Adapters wrap one live connection handle. Statement execution runs inside
    :meth:`handle_database_exceptions` so native client errors surface as
    :class:`~sparrowsql.exceptions.ExecutionError`.
    """

    __slots__ = ("connection",)

    kind: ClassVar[DriverKind]
    dialect: ClassVar[Optional[str]] = None

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    @classmethod
    @abstractmethod
    def connect(cls, descriptor: "ConnectionDescriptor") -> Any:
        """Open a native connection for ``descriptor``.

        Raises:
            ConnectionError: If the backend cannot be reached or rejects the credentials.
        """

    @classmethod
    def from_descriptor(cls, descriptor: "ConnectionDescriptor") -> "DriverAdapterBase":
        """Connect and wrap the new handle."""
        driver = cls(cls.connect(descriptor))
        logger.info("Connected %s driver", cls.kind, extra={"extra_fields": descriptor.safe_dict()})
        return driver

    def with_cursor(self, connection: Any) -> "AbstractContextManager[Any]":
        """Create a context manager that yields a cursor and closes it afterwards."""
        return DBAPICursor(connection)

    @abstractmethod
    def handle_database_exceptions(self) -> "AbstractContextManager[None]":
        """Translate native client errors into sparrowsql errors."""

    def execute(self, sql: str) -> ExecutionResult:
        """Execute ``sql`` and normalize the outcome.

        Raises:
            ExecutionError: If the backend rejects the statement.
        """
        with self.handle_database_exceptions(), self.with_cursor(self.connection) as cursor:
            return self._execute_statement(cursor, sql)

    def _execute_statement(self, cursor: Any, sql: str) -> ExecutionResult:
        """Execute through a DB-API cursor, pre-fetching rows when the statement returns any."""
        cursor.execute(sql)
        last_id = self._last_insert_id(cursor) if is_insert_statement(sql, self.sql_dialect) else None
        if cursor.description:
            column_names = [col[0] for col in cursor.description]
            data = normalize_rows(column_names, cursor.fetchall())
            return ExecutionResult(data, 0, last_id, len(data), True)
        return ExecutionResult([], resolve_rowcount(cursor), last_id, None, False)

    def _last_insert_id(self, cursor: Any) -> Any:
        """Row id generated by the INSERT just run on ``cursor``."""
        last_id = getattr(cursor, "lastrowid", None)
        return last_id or None

    @property
    def sql_dialect(self) -> Optional[str]:
        """sqlglot dialect used to inspect and quote statements for this connection."""
        return self.dialect

    def quote(self, value: str) -> str:
        """Quote a string literal in this driver's dialect."""
        return exp.Literal.string(value).sql(dialect=self.sql_dialect)

    def close(self) -> None:
        """Close the wrapped connection."""
        self.connection.close()

    @contextlib.contextmanager
    def _translate(
        self, native_error: "type[BaseException] | tuple[type[BaseException], ...]", label: str
    ) -> "Generator[None, None, None]":
        """Wrap ``native_error`` raised inside the block into an ``ExecutionError``."""
        try:
            yield
        except native_error as e:
            msg = f"{label} database error: {e}"
            raise ExecutionError(msg) from e

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!s}, connection={self.connection!r})"
