"""Fluent statement builder.

The builder accumulates clause fragments in a :class:`QueryState` and
assembles them into a single SQL string::

    builder = StatementBuilder().from_("user")
    builder.where("id", 123).select().sql()
    # SELECT * FROM user WHERE id=123
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Final, Optional, Union, overload

from sparrowsql.core.conditions import parse_condition
from sparrowsql.core.quoting import quote_value
from sparrowsql.core.state import QueryState
from sparrowsql.exceptions import SQLBuilderError
from sparrowsql.typing import Empty, EmptyType

if TYPE_CHECKING:
    from typing_extensions import Self

    from sparrowsql.driver import DriverAdapterBase

__all__ = ("JOIN_TYPES", "SORT_DIRECTIONS", "StatementBuilder")

JOIN_TYPES: Final = ("INNER", "LEFT OUTER", "RIGHT OUTER", "FULL OUTER")
SORT_DIRECTIONS: Final = ("ASC", "DESC")

FieldList = Union[str, Sequence[str]]


def _join_fields(fields: FieldList, separator: str = ",") -> str:
    return fields if isinstance(fields, str) else separator.join(fields)


def _join_parts(parts: "Sequence[str]") -> str:
    return " ".join(part.strip() for part in parts if part and part.strip()).strip()


class StatementBuilder:
    """Accumulates clauses for SELECT, INSERT, UPDATE and DELETE statements."""

    def __init__(self) -> None:
        self._state = QueryState()
        self._driver: "Optional[DriverAdapterBase]" = None

    @property
    def state(self) -> QueryState:
        """The current clause state."""
        return self._state

    @property
    def table(self) -> str:
        return self._state.table

    def quote(self, value: Any) -> str:
        """Render ``value`` as a SQL literal in the active driver's dialect."""
        return quote_value(value, self._driver)

    def _check_table(self) -> None:
        if not self._state.table:
            msg = "Table is not defined."
            raise SQLBuilderError(msg)

    def _condition(self, field: Any, value: "Any | EmptyType", join: Optional[str], escape: bool = True) -> str:
        return parse_condition(field, value, join, escape, self.quote)

    def reset(self) -> "Self":
        """Clear every clause and the assembled SQL, keeping the table."""
        self._state = self._state.cleared()
        return self

    def from_(self, table: str, reset: bool = True) -> "Self":
        """Set the table for the next statement.

        Args:
            table: Table name.
            reset: Drop clauses accumulated for the previous statement.
        """
        self._state = self._state.with_table(table, reset)
        return self

    def join(self, table: str, fields: "Mapping[str, Any]", join_type: str = "INNER") -> "Self":
        """Add a table join.

        Args:
            table: Table to join to.
            fields: Column pairs to join on, e.g. ``{"role.id": "user.role_id"}``.
            join_type: One of ``INNER``, ``LEFT OUTER``, ``RIGHT OUTER``, ``FULL OUTER``.

        Raises:
            SQLBuilderError: For an unsupported join type.
        """
        normalized = join_type.upper()
        if normalized not in JOIN_TYPES:
            msg = "Invalid join type."
            raise SQLBuilderError(msg)
        condition = self._condition(fields, Empty, " ON", escape=False)
        self._state = self._state.replace(joins=f"{self._state.joins} {normalized} JOIN {table}{condition}")
        return self

    def left_join(self, table: str, fields: "Mapping[str, Any]") -> "Self":
        return self.join(table, fields, "LEFT OUTER")

    def right_join(self, table: str, fields: "Mapping[str, Any]") -> "Self":
        return self.join(table, fields, "RIGHT OUTER")

    def full_join(self, table: str, fields: "Mapping[str, Any]") -> "Self":
        return self.join(table, fields, "FULL OUTER")

    def where(self, field: Any, value: "Any | EmptyType" = Empty) -> "Self":
        """Add WHERE conditions.

        Args:
            field: A raw fragment, a ``"column operator"`` string or a mapping of them.
            value: Value to compare to. Leave unset for a raw fragment.
        """
        join = "" if self._state.where else "WHERE"
        self._state = self._state.replace(where=self._state.where + self._condition(field, value, join))
        return self

    def having(self, field: Any, value: "Any | EmptyType" = Empty) -> "Self":
        """Add HAVING conditions, with the same input shapes as :meth:`where`."""
        join = "" if self._state.having else "HAVING"
        self._state = self._state.replace(having=self._state.having + self._condition(field, value, join))
        return self

    def order_by(self, fields: FieldList, direction: str = "ASC") -> "Self":
        """Add fields to ORDER BY.

        Raises:
            SQLBuilderError: If ``direction`` is not ``ASC`` or ``DESC``.
        """
        normalized = direction.upper()
        if normalized not in SORT_DIRECTIONS:
            msg = "Invalid direction."
            raise SQLBuilderError(msg)
        join = "," if self._state.order else "ORDER BY"
        names = [fields] if isinstance(fields, str) else list(fields)
        sort = ", ".join(f"{name} {normalized}" for name in names)
        self._state = self._state.replace(order=f"{self._state.order}{join} {sort}")
        return self

    def sort_asc(self, fields: FieldList) -> "Self":
        return self.order_by(fields, "ASC")

    def sort_desc(self, fields: FieldList) -> "Self":
        return self.order_by(fields, "DESC")

    def group_by(self, fields: FieldList) -> "Self":
        """Add fields to GROUP BY."""
        join = "," if self._state.groups else "GROUP BY"
        self._state = self._state.replace(groups=f"{self._state.groups}{join} {_join_fields(fields)}")
        return self

    def limit(self, limit: Optional[int], offset: Optional[int] = None) -> "Self":
        """Limit the number of rows, optionally setting the offset too."""
        if limit is not None:
            self._state = self._state.replace(limit=int(limit))
        if offset is not None:
            self.offset(offset)
        return self

    def offset(self, offset: Optional[int], limit: Optional[int] = None) -> "Self":
        """Skip rows, optionally setting the limit too."""
        if offset is not None:
            self._state = self._state.replace(offset=int(offset))
        if limit is not None:
            self.limit(limit)
        return self

    def distinct(self) -> "Self":
        self._state = self._state.replace(distinct=True)
        return self

    def between(self, field: str, low: Any, high: Any) -> "Self":
        """Add a ``field BETWEEN low AND high`` condition with quoted bounds."""
        return self.where(f"{field} BETWEEN {self.quote(low)} AND {self.quote(high)}")

    def select(self, fields: FieldList = "*", limit: Optional[int] = None, offset: Optional[int] = None) -> "Self":
        """Assemble a SELECT statement.

        Raises:
            SQLBuilderError: If the table is not set.
        """
        self._check_table()
        self.limit(limit, offset)
        return self.sql(self._state.select_parts(_join_fields(fields)))

    def insert(self, data: "Mapping[str, Any]") -> "Self":
        """Assemble an INSERT statement; an empty mapping leaves the SQL unchanged.

        Raises:
            SQLBuilderError: If the table is not set.
        """
        self._check_table()
        if not data:
            return self
        keys = ",".join(data.keys())
        values = ",".join(self.quote(value) for value in data.values())
        return self.sql(["INSERT INTO", self._state.table, f"({keys})", "VALUES", f"({values})"])

    def update(self, data: "Union[Mapping[Any, Any], str]") -> "Self":
        """Assemble an UPDATE statement from the current WHERE clause.

        ``data`` maps columns to values. Integer keys and a plain string are
        taken as literal ``SET`` expressions.

        Raises:
            SQLBuilderError: If the table is not set.
        """
        self._check_table()
        if not data:
            return self
        if isinstance(data, str):
            values = [data]
        else:
            values = [value if isinstance(key, int) else f"{key}={self.quote(value)}" for key, value in data.items()]
        return self.sql(["UPDATE", self._state.table, "SET", ",".join(values), self._state.where])

    def delete(self, where: "Optional[Mapping[str, Any]]" = None) -> "Self":
        """Assemble a DELETE statement, adding ``where`` conditions first.

        Raises:
            SQLBuilderError: If the table is not set.
        """
        self._check_table()
        if where:
            self.where(where)
        return self.sql(["DELETE FROM", self._state.table, self._state.where])

    @overload
    def sql(self) -> str: ...

    @overload
    def sql(self, statement: "Union[str, Sequence[str]]") -> "Self": ...

    def sql(self, statement: "Union[str, Sequence[str], EmptyType]" = Empty) -> "Union[str, Self]":
        """Get or set the SQL statement.

        Args:
            statement: Raw SQL, or clause parts joined with single spaces. When
                omitted the current statement is returned.
        """
        if statement is Empty:
            return self._state.sql
        text = statement.strip() if isinstance(statement, str) else _join_parts(statement)
        self._state = self._state.replace(sql=text)
        return self
