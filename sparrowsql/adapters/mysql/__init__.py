"""MySQL / MariaDB adapter for sparrowsql, backed by mysql-connector-python."""

from sparrowsql.adapters.mysql.driver import MysqlDriver, mysql_connection_params

__all__ = ("MysqlDriver", "mysql_connection_params")
