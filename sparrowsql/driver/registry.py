"""Driver dispatch: pick and build the adapter for a connection spec."""

import sqlite3
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Union

from sparrowsql.driver._common import DriverAdapterBase, DriverKind
from sparrowsql.driver._url import ConnectionDescriptor, parse_connection_url
from sparrowsql.exceptions import ImproperConfigurationError
from sparrowsql.utils.logging import get_logger

if TYPE_CHECKING:
    from typing_extensions import TypeAlias

__all__ = ("DriverSpec", "adapter_class", "create_driver", "detect_kind")

logger = get_logger("driver.registry")

DriverSpec: "TypeAlias" = Union[str, ConnectionDescriptor, "Mapping[str, Any]", DriverAdapterBase, Any]

_MODULE_KINDS = {
    "psycopg": DriverKind.PGSQL,
    "mysql": DriverKind.MYSQL,
    "duckdb": DriverKind.DUCKDB,
    "_duckdb": DriverKind.DUCKDB,
}


def adapter_class(kind: DriverKind) -> "type[DriverAdapterBase]":
    """Return the adapter class serving ``kind``.

    Adapters are imported lazily so optional clients are only required when used.
    """
    if kind is DriverKind.SQLITE:
        from sparrowsql.adapters.sqlite import SqliteDriver

        return SqliteDriver
    if kind is DriverKind.PGSQL:
        from sparrowsql.adapters.psycopg import PsycopgDriver

        return PsycopgDriver
    if kind is DriverKind.MYSQL:
        from sparrowsql.adapters.mysql import MysqlDriver

        return MysqlDriver
    if kind is DriverKind.DUCKDB:
        from sparrowsql.adapters.duckdb import DuckDBDriver

        return DuckDBDriver
    from sparrowsql.adapters.dbapi import DbapiDriver

    return DbapiDriver


def detect_kind(handle: Any) -> DriverKind:
    """Work out which adapter serves a live connection handle.

    Raises:
        ImproperConfigurationError: If ``handle`` is not a recognizable connection.
    """
    if isinstance(handle, sqlite3.Connection):
        return DriverKind.SQLITE
    module_root = type(handle).__module__.split(".")[0]
    kind = _MODULE_KINDS.get(module_root)
    if kind is not None:
        return kind
    if callable(getattr(handle, "cursor", None)):
        return DriverKind.DBAPI
    msg = "Invalid database type."
    raise ImproperConfigurationError(msg)


def create_driver(spec: DriverSpec) -> DriverAdapterBase:
    """Build a driver adapter from a connection URL, descriptor, mapping or live handle.

    Args:
        spec: A ``scheme://...`` URL, a :class:`ConnectionDescriptor`, a mapping
            of descriptor fields, an existing adapter, or a live connection object.

    Raises:
        ImproperConfigurationError: If ``spec`` cannot be mapped onto a backend.

    Returns:
        A connected adapter.
    """
    if isinstance(spec, DriverAdapterBase):
        return spec
    if isinstance(spec, str):
        spec = parse_connection_url(spec)
    elif isinstance(spec, Mapping):
        spec = ConnectionDescriptor.from_mapping(spec)
    if isinstance(spec, ConnectionDescriptor):
        return adapter_class(spec.driver_kind).from_descriptor(spec)

    kind = detect_kind(spec)
    logger.debug("Wrapping live %s connection", kind)
    return adapter_class(kind)(spec)
