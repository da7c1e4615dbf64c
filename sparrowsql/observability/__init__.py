"""Statement statistics."""

from sparrowsql.observability._stats import QueryRecord, QueryStats, StatsCollector

__all__ = ("QueryRecord", "QueryStats", "StatsCollector")
