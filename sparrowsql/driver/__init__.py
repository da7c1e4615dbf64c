"""Driver dispatch and the adapter contract."""

from sparrowsql.driver._common import (
    DriverAdapterBase,
    DriverKind,
    ExecutionResult,
    is_insert_statement,
    is_modifying_statement,
    normalize_rows,
    resolve_rowcount,
)
from sparrowsql.driver._url import ConnectionDescriptor, parse_connection_url
from sparrowsql.driver.registry import DriverSpec, adapter_class, create_driver, detect_kind

__all__ = (
    "ConnectionDescriptor",
    "DriverAdapterBase",
    "DriverKind",
    "DriverSpec",
    "ExecutionResult",
    "adapter_class",
    "create_driver",
    "detect_kind",
    "is_insert_statement",
    "is_modifying_statement",
    "normalize_rows",
    "parse_connection_url",
    "resolve_rowcount",
)
