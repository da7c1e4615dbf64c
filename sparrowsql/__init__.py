"""sparrowsql: a fluent SQL builder with pluggable drivers and result caching."""

from sparrowsql import adapters, cache, core, driver, exceptions, observability, typing, utils
from sparrowsql.__metadata__ import __version__
from sparrowsql.base import Sparrow
from sparrowsql.cache import CacheGate, FileCache, MemoryCache, create_cache
from sparrowsql.config import SparrowConfig, SparrowFactory
from sparrowsql.core import StatementBuilder, parse_condition, quote_value
from sparrowsql.driver import ConnectionDescriptor, DriverAdapterBase, DriverKind, ExecutionResult, create_driver
from sparrowsql.exceptions import (
    ConfigurationError,
    ConnectionError,
    ExecutionError,
    ImproperConfigurationError,
    SparrowError,
    SQLBuilderError,
)
from sparrowsql.mapping import EntityMapping, entity, register_entity
from sparrowsql.observability import QueryStats, StatsCollector
from sparrowsql.typing import DictRow, Empty

__all__ = (
    "CacheGate",
    "ConfigurationError",
    "ConnectionDescriptor",
    "ConnectionError",
    "DictRow",
    "DriverAdapterBase",
    "DriverKind",
    "Empty",
    "EntityMapping",
    "ExecutionError",
    "ExecutionResult",
    "FileCache",
    "ImproperConfigurationError",
    "MemoryCache",
    "QueryStats",
    "SQLBuilderError",
    "Sparrow",
    "SparrowConfig",
    "SparrowError",
    "SparrowFactory",
    "StatementBuilder",
    "StatsCollector",
    "__version__",
    "adapters",
    "cache",
    "core",
    "create_cache",
    "create_driver",
    "driver",
    "entity",
    "exceptions",
    "observability",
    "parse_condition",
    "quote_value",
    "register_entity",
    "typing",
    "utils",
)
