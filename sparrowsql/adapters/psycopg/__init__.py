"""PostgreSQL adapter for sparrowsql, backed by psycopg."""

from sparrowsql.adapters.psycopg.driver import PsycopgDriver, psycopg_connection_params

__all__ = ("PsycopgDriver", "psycopg_connection_params")
