"""Immutable clause state owned by a statement builder."""

from dataclasses import dataclass, replace
from typing import Any, Optional

__all__ = ("QueryState",)


@dataclass(frozen=True, slots=True)
class QueryState:
    """Clause fragments accumulated for one logical statement.

    Fragments keep their own leading keyword (``WHERE``, ``ORDER BY`` ...) so a
    SELECT is assembled by concatenating the non-empty ones in a fixed order.
    ``sql`` holds the assembled or caller supplied statement; once set, clause
    fragments no longer contribute to it.
    """

    table: str = ""
    where: str = ""
    joins: str = ""
    order: str = ""
    groups: str = ""
    having: str = ""
    distinct: bool = False
    limit: Optional[int] = None
    offset: Optional[int] = None
    sql: str = ""

    def replace(self, **changes: Any) -> "QueryState":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    def cleared(self) -> "QueryState":
        """Return an empty state that keeps only the table."""
        return QueryState(table=self.table)

    def with_table(self, table: str, reset: bool = True) -> "QueryState":
        """Return the state for ``table``, dropping clauses unless ``reset`` is false."""
        if reset:
            return QueryState(table=table)
        return self.replace(table=table)

    def select_parts(self, fields: str) -> "list[str]":
        """Clause parts of a SELECT over ``fields`` in assembly order."""
        return [
            "SELECT",
            "DISTINCT" if self.distinct else "",
            fields,
            "FROM",
            self.table,
            self.joins,
            self.where,
            self.groups,
            self.having,
            self.order,
            f"LIMIT {self.limit}" if self.limit is not None else "",
            f"OFFSET {self.offset}" if self.offset is not None else "",
        ]
