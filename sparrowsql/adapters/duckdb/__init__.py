"""DuckDB adapter for sparrowsql."""

from sparrowsql.adapters.duckdb.driver import DuckDBDriver

__all__ = ("DuckDBDriver",)
