"""Per-statement timing and row counters."""

from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Optional

from sparrowsql.utils.logging import get_logger

__all__ = ("QueryRecord", "QueryStats", "StatsCollector")

logger = get_logger("observability")


@dataclass(slots=True, frozen=True)
class QueryRecord:
    """One executed statement."""

    query: str
    time: float
    rows: Optional[int]
    changes: Optional[int]

    def as_dict(self) -> "dict[str, Any]":
        return {"query": self.query, "time": self.time, "rows": self.rows, "changes": self.changes}


@dataclass(slots=True)
class QueryStats:
    """Totals derived from the statement log, plus cache hits by key."""

    queries: "list[QueryRecord]" = field(default_factory=list)
    cached: "dict[str, str]" = field(default_factory=dict)
    total_time: float = 0.0
    num_queries: int = 0
    num_rows: int = 0
    num_changes: int = 0
    avg_query_time: float = 0.0

    def as_dict(self) -> "dict[str, Any]":
        """Return the stats payload as a dictionary."""
        return {
            "queries": [record.as_dict() for record in self.queries],
            "cached": dict(self.cached),
            "total_time": self.total_time,
            "num_queries": self.num_queries,
            "num_rows": self.num_rows,
            "num_changes": self.num_changes,
            "avg_query_time": self.avg_query_time,
        }


class StatsCollector:
    """Collects timings of executed statements.

    Recording is a no-op while disabled; the statement log keeps whatever was
    gathered before. Totals are never stored, :meth:`snapshot` recomputes them.
    """

    __slots__ = ("_cached", "_records", "enabled")

    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled
        self._records: list[QueryRecord] = []
        self._cached: dict[str, str] = {}

    def start(self) -> float:
        """Return a monotonic start mark for :meth:`record`."""
        return perf_counter()

    def record(self, query: str, started: float, rows: Optional[int] = None, changes: Optional[int] = None) -> None:
        if not self.enabled:
            return
        elapsed = perf_counter() - started
        self._records.append(QueryRecord(query=query, time=elapsed, rows=rows, changes=changes))
        logger.debug(
            "Executed statement in %.6fs", elapsed, extra={"extra_fields": {"sql": query, "rows": rows, "changes": changes}}
        )

    def record_cache_hit(self, key: str, sql: str) -> None:
        if not self.enabled:
            return
        self._cached[key] = sql
        logger.debug("Served %s from cache", key, extra={"extra_fields": {"sql": sql}})

    def snapshot(self) -> QueryStats:
        """Return the statement log with totals computed from it."""
        total_time = sum(record.time for record in self._records)
        num_queries = len(self._records)
        return QueryStats(
            queries=list(self._records),
            cached=dict(self._cached),
            total_time=total_time,
            num_queries=num_queries,
            num_rows=sum(record.rows or 0 for record in self._records),
            num_changes=sum(record.changes or 0 for record in self._records),
            avg_query_time=total_time / max(num_queries, 1),
        )

    def reset(self) -> None:
        self._records.clear()
        self._cached.clear()

    def __len__(self) -> int:
        return len(self._records)
