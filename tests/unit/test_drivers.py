import sqlite3
import sys
import types
from pathlib import Path
from unittest.mock import Mock

import pytest

from sparrowsql.adapters.dbapi import DbapiDriver
from sparrowsql.adapters.dbapi.driver import _native_error_type
from sparrowsql.adapters.duckdb import DuckDBDriver
from sparrowsql.adapters.mysql import MysqlDriver, mysql_connection_params
from sparrowsql.adapters.psycopg import PsycopgDriver, psycopg_connection_params
from sparrowsql.adapters.sqlite import SqliteDriver, sqlite_connection_params
from sparrowsql.driver import (
    ConnectionDescriptor,
    DriverKind,
    ExecutionResult,
    create_driver,
    detect_kind,
    is_insert_statement,
    is_modifying_statement,
    normalize_rows,
    parse_connection_url,
    resolve_rowcount,
)
from sparrowsql.exceptions import ConnectionError, ExecutionError, ImproperConfigurationError, MissingDependencyError


def test_sqlite_select_rows_are_dicts_in_select_order(sqlite_connection: sqlite3.Connection) -> None:
    driver = SqliteDriver(sqlite_connection)
    result = driver.execute("SELECT points, name FROM user ORDER BY id LIMIT 2")
    assert result == ExecutionResult(
        [{"points": 10, "name": "bob"}, {"points": 30, "name": "alice"}], 0, None, 2, True
    )
    assert list(result.rows[0]) == ["points", "name"]


def test_sqlite_insert_reports_id_and_count(sqlite_connection: sqlite3.Connection) -> None:
    driver = SqliteDriver(sqlite_connection)
    result = driver.execute("INSERT INTO user (name, points) VALUES ('carol', 1)")
    assert result.rows == []
    assert result.rows_affected == 1
    assert result.last_insert_id == 4
    assert result.returns_rows is False


def test_sqlite_update_count(sqlite_connection: sqlite3.Connection) -> None:
    result = SqliteDriver(sqlite_connection).execute("UPDATE user SET points = 0 WHERE points > 15")
    assert result.rows_affected == 2


def test_sqlite_insert_id_is_not_carried_over(sqlite_connection: sqlite3.Connection) -> None:
    driver = SqliteDriver(sqlite_connection)
    assert driver.execute("INSERT INTO user (name, points) VALUES ('carol', 1)").last_insert_id == 4
    assert driver.execute("UPDATE user SET points = 2 WHERE id = 1").last_insert_id is None
    assert driver.execute("SELECT id FROM user").last_insert_id is None
    assert driver.execute("DELETE FROM user WHERE id = 4").last_insert_id is None
    assert driver.execute("REPLACE INTO user (id, name, points) VALUES (5, 'dan', 3)").last_insert_id == 5


def test_sqlite_error_is_wrapped(sqlite_connection: sqlite3.Connection) -> None:
    with pytest.raises(ExecutionError, match="SQLite database error: no such table: missing") as exc_info:
        SqliteDriver(sqlite_connection).execute("SELECT * FROM missing")
    assert isinstance(exc_info.value.__cause__, sqlite3.Error)


def test_sqlite_quote_doubles_single_quotes(sqlite_connection: sqlite3.Connection) -> None:
    assert SqliteDriver(sqlite_connection).quote("O'Dell") == "'O''Dell'"


def test_sqlite_connection_params() -> None:
    assert sqlite_connection_params(ConnectionDescriptor(kind="sqlite")) == {
        "database": ":memory:",
        "isolation_level": None,
    }
    params = sqlite_connection_params(ConnectionDescriptor(kind="sqlite", database="file:app.db?mode=ro"))
    assert params["uri"] is True


def test_sqlite_connect_failure(tmp_path: Path) -> None:
    descriptor = ConnectionDescriptor(kind="sqlite", database=str(tmp_path / "missing" / "app.db"))
    with pytest.raises(ConnectionError, match="SQLite connection error"):
        SqliteDriver.connect(descriptor)


def test_create_driver_from_url(tmp_path: Path) -> None:
    database = tmp_path / "app.db"
    driver = create_driver(f"sqlite://{database}")
    try:
        assert isinstance(driver, SqliteDriver)
        driver.execute("CREATE TABLE t (id INTEGER)")
        driver.execute("INSERT INTO t VALUES (1)")
    finally:
        driver.close()
    assert database.exists()


def test_create_driver_from_mapping() -> None:
    driver = create_driver({"kind": "sqlite3", "database": ":memory:"})
    assert isinstance(driver, SqliteDriver)
    assert driver.execute("SELECT 1 AS one").rows == [{"one": 1}]


def test_create_driver_from_live_handle(sqlite_connection: sqlite3.Connection) -> None:
    driver = create_driver(sqlite_connection)
    assert isinstance(driver, SqliteDriver)
    assert driver.connection is sqlite_connection


def test_create_driver_returns_existing_adapter(sqlite_connection: sqlite3.Connection) -> None:
    driver = SqliteDriver(sqlite_connection)
    assert create_driver(driver) is driver


def test_create_driver_rejects_unknown_objects() -> None:
    with pytest.raises(ImproperConfigurationError, match="Invalid database type"):
        create_driver(object())


def test_pdo_sqlite_uses_dbapi_adapter() -> None:
    driver = create_driver("pdosqlite://:memory:")
    assert isinstance(driver, DbapiDriver)
    assert driver.kind is DriverKind.DBAPI
    assert driver.execute("SELECT 2 AS two").rows == [{"two": 2}]
    assert driver.quote("it's") == "'it''s'"


def test_dbapi_driver_wraps_module_errors(sqlite_connection: sqlite3.Connection) -> None:
    with pytest.raises(ExecutionError, match="DB-API database error"):
        DbapiDriver(sqlite_connection).execute("SELECT * FROM missing")


def test_pdo_sqlite_insert_id_only_after_inserts() -> None:
    driver = create_driver("pdosqlite://:memory:")
    driver.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, label TEXT)")
    assert driver.execute("INSERT INTO t (label) VALUES ('a')").last_insert_id == 1
    assert driver.execute("UPDATE t SET label = 'b'").last_insert_id is None
    assert driver.execute("SELECT * FROM t").last_insert_id is None


def test_native_error_type_prefers_innermost_module(monkeypatch: pytest.MonkeyPatch) -> None:
    class ConnectorError(Exception):
        pass

    package = types.ModuleType("fakedb")
    connector = types.ModuleType("fakedb.connector")
    connector.Error = ConnectorError  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "fakedb", package)
    monkeypatch.setitem(sys.modules, "fakedb.connector", connector)
    connection_type = type("Connection", (), {"__module__": "fakedb.connector.connection"})

    assert _native_error_type(connection_type()) is ConnectorError


def test_native_error_type_uses_connection_attribute() -> None:
    class DriverError(Exception):
        pass

    connection = Mock(Error=DriverError)
    assert _native_error_type(connection) is DriverError


@pytest.mark.parametrize(
    ("module", "kind"),
    [
        ("psycopg", DriverKind.PGSQL),
        ("psycopg.connection", DriverKind.PGSQL),
        ("mysql.connector.connection", DriverKind.MYSQL),
        ("duckdb", DriverKind.DUCKDB),
        ("_duckdb", DriverKind.DUCKDB),
    ],
)
def test_detect_kind_by_module(module: str, kind: DriverKind) -> None:
    handle_type = type("Connection", (), {"__module__": module})
    assert detect_kind(handle_type()) is kind


def test_detect_kind_generic_dbapi() -> None:
    handle = Mock(spec=["cursor", "close"])
    assert detect_kind(handle) is DriverKind.DBAPI


def test_psycopg_connection_params_drop_unset_values() -> None:
    descriptor = parse_connection_url("pgsql://app@db.internal/orders")
    assert psycopg_connection_params(descriptor) == {
        "host": "db.internal",
        "port": 5432,
        "dbname": "orders",
        "user": "app",
    }


def test_psycopg_missing_dependency(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "psycopg", None)
    with pytest.raises(MissingDependencyError, match="sparrowsql\\[psycopg\\]"):
        PsycopgDriver.connect(parse_connection_url("pgsql://localhost/db"))


def test_psycopg_has_no_insert_id() -> None:
    assert PsycopgDriver(Mock())._last_insert_id(Mock(lastrowid=7)) is None


def test_mysql_connection_params() -> None:
    descriptor = parse_connection_url("mysql://root:pw@db:3307/shop")
    assert mysql_connection_params(descriptor) == {
        "host": "db",
        "port": 3307,
        "database": "shop",
        "user": "root",
        "password": "pw",
    }


def test_mysql_missing_dependency(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "mysql", None)
    monkeypatch.setitem(sys.modules, "mysql.connector", None)
    with pytest.raises(MissingDependencyError, match="sparrowsql\\[mysql\\]"):
        MysqlDriver.connect(parse_connection_url("mysql://localhost/db"))


def test_mysql_quote_uses_connection_converter() -> None:
    connection = Mock()
    connection.converter.escape.return_value = b"O\\'Dell"
    assert MysqlDriver(connection).quote("O'Dell") == "'O\\'Dell'"
    connection.converter.escape.assert_called_once_with("O'Dell")


def test_duckdb_modifying_statement_reads_count_row() -> None:
    cursor = Mock()
    cursor.fetchone.return_value = (3,)
    result = DuckDBDriver(Mock())._execute_statement(cursor, "UPDATE t SET x = 1")
    assert result == ExecutionResult([], 3, None, None, False)
    cursor.execute.assert_called_once_with("UPDATE t SET x = 1")


def test_duckdb_select_rows() -> None:
    cursor = Mock()
    cursor.description = [("id",), ("name",)]
    cursor.fetchall.return_value = [(1, "a"), (2, "b")]
    result = DuckDBDriver(Mock())._execute_statement(cursor, "SELECT id, name FROM t")
    assert result.rows == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]
    assert result.num_rows == 2


def test_duckdb_missing_dependency(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "duckdb", None)
    with pytest.raises(MissingDependencyError, match="duckdb"):
        DuckDBDriver.connect(parse_connection_url("duckdb://:memory:"))


@pytest.mark.parametrize(
    ("sql", "expected"),
    [
        ("INSERT INTO t VALUES (1)", True),
        ("update t set x = 1", True),
        ("DELETE FROM t WHERE id = 1", True),
        ("INSERT INTO t VALUES (1) RETURNING id", False),
        ("SELECT * FROM t", False),
    ],
)
def test_is_modifying_statement(sql: str, expected: bool) -> None:
    assert is_modifying_statement(sql, "postgres") is expected


@pytest.mark.parametrize(
    ("sql", "expected"),
    [
        ("INSERT INTO t VALUES (1)", True),
        ("  replace into t (id) values (1)", True),
        ("INSERT INTO t VALUES (1) RETURNING id", True),
        ("UPDATE t SET x = 1", False),
        ("DELETE FROM t", False),
        ("SELECT * FROM t", False),
    ],
)
def test_is_insert_statement(sql: str, expected: bool) -> None:
    assert is_insert_statement(sql, "sqlite") is expected


def test_normalize_rows_converts_native_values() -> None:
    import datetime
    import uuid
    from decimal import Decimal

    identifier = uuid.UUID("12345678-1234-5678-1234-567812345678")
    rows = normalize_rows(
        ["a", "b", "c", "d", "e"],
        [(Decimal("3"), Decimal("1.5"), datetime.date(2024, 5, 1), identifier, bytearray(b"x"))],
    )
    assert rows == [{"a": 3, "b": 1.5, "c": "2024-05-01", "d": str(identifier), "e": b"x"}]


def test_resolve_rowcount() -> None:
    assert resolve_rowcount(Mock(rowcount=10)) == 10
    assert resolve_rowcount(Mock(rowcount=-1)) == 0
    assert resolve_rowcount(Mock(spec=[])) == 0
