"""Generic DB-API 2.0 adapter for sparrowsql."""

from sparrowsql.adapters.dbapi.driver import PDO_DIALECTS, DbapiDriver

__all__ = ("PDO_DIALECTS", "DbapiDriver")
