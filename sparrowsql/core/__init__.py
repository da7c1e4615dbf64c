"""Statement building: value quoting, condition parsing and clause assembly."""

from sparrowsql.core.builder import JOIN_TYPES, SORT_DIRECTIONS, StatementBuilder
from sparrowsql.core.conditions import (
    OPERATOR_ALIASES,
    Condition,
    FieldMap,
    FieldValue,
    RawFragment,
    parse_condition,
    render_condition,
    to_condition,
)
from sparrowsql.core.quoting import escape_string, is_numeric, quote_value
from sparrowsql.core.state import QueryState

__all__ = (
    "JOIN_TYPES",
    "OPERATOR_ALIASES",
    "SORT_DIRECTIONS",
    "Condition",
    "FieldMap",
    "FieldValue",
    "QueryState",
    "RawFragment",
    "StatementBuilder",
    "escape_string",
    "is_numeric",
    "parse_condition",
    "quote_value",
    "render_condition",
    "to_condition",
)
