"""Boolean condition parsing for WHERE, HAVING and JOIN ... ON clauses.

Loose caller input is first normalized into one of three condition shapes and
then rendered into a SQL fragment that carries its own leading join word::

    >>> parse_condition("id", 123, "WHERE")
    'WHERE id=123'
    >>> parse_condition("|name %", "%bob%")
    " OR name LIKE '%bob%'"
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Final, Optional, Union

from sparrowsql.core.quoting import is_numeric, quote_value
from sparrowsql.exceptions import SQLBuilderError
from sparrowsql.typing import Empty, EmptyType

__all__ = (
    "OPERATOR_ALIASES",
    "Condition",
    "FieldMap",
    "FieldValue",
    "RawFragment",
    "parse_condition",
    "render_condition",
    "to_condition",
)

OPERATOR_ALIASES: Final = {"%": " LIKE ", "!%": " NOT LIKE ", "@": " IN ", "!@": " NOT IN "}
NULL_OPERATORS: Final = {"=": " IS NULL", "!=": " IS NOT NULL", "<>": " IS NOT NULL"}
OR_MARKER: Final = "|"

Quoter = Callable[[Any], str]


@dataclass(frozen=True, slots=True)
class RawFragment:
    """A caller supplied boolean expression, already valid SQL."""

    text: str


@dataclass(frozen=True, slots=True)
class FieldValue:
    """A single ``column operator value`` comparison.

    ``name`` keeps a leading ``|`` when the caller asked for an OR join.
    """

    name: str
    operator: str
    value: Any


@dataclass(frozen=True, slots=True)
class FieldMap:
    """Ordered column/value pairs rendered one after another."""

    pairs: "tuple[tuple[str, Any], ...]"


Condition = Union[RawFragment, FieldValue, FieldMap]


def to_condition(field: Any, value: "Any | EmptyType" = Empty) -> Condition:
    """Normalize loose caller input into a condition.

    Args:
        field: A raw fragment, a ``"column operator"`` string, or a mapping of
            such strings to values.
        value: The comparison value. Leave unset to treat ``field`` as raw SQL.

    Raises:
        SQLBuilderError: If ``field`` is neither a string nor a mapping.

    Returns:
        The normalized condition.
    """
    if isinstance(field, (RawFragment, FieldValue, FieldMap)):
        return field
    if isinstance(field, str):
        if value is Empty:
            return RawFragment(field)
        name, _, operator = field.strip().partition(" ")
        return FieldValue(name, operator.strip() or "=", value)
    if isinstance(field, Mapping):
        return FieldMap(tuple((str(key), item) for key, item in field.items()))
    msg = "Invalid where condition."
    raise SQLBuilderError(msg)


def _infer_join(name: str) -> str:
    return " OR" if name.startswith(OR_MARKER) else " AND"


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _render_field_value(condition: FieldValue, join: Optional[str], escape: bool, quote: Quoter) -> str:
    if not join:
        join = _infer_join(condition.name)

    operator = condition.operator
    rendered_operator = OPERATOR_ALIASES.get(operator, operator)
    value = condition.value

    if _is_sequence(value):
        if "@" not in operator:
            rendered_operator = " IN "
        rendered_value = "({})".format(",".join(quote(item) for item in value))
    elif value is None and operator in NULL_OPERATORS:
        rendered_operator = NULL_OPERATORS[operator]
        rendered_value = ""
    elif is_numeric(value) or (not escape and isinstance(value, str)):
        rendered_value = str(value)
    else:
        rendered_value = quote(value)

    column = condition.name.replace(OR_MARKER, "")
    return f"{join} {column}{rendered_operator}{rendered_value}"


def render_condition(
    condition: Condition, join: Optional[str] = None, escape: bool = True, quote: Quoter = quote_value
) -> str:
    """Render a normalized condition into a SQL fragment.

    Args:
        condition: The condition to render.
        join: Leading join word (``WHERE``, ``HAVING``, `` ON``). When empty the
            word is inferred per fragment: ``OR`` for a leading ``|``, else ``AND``.
        escape: Quote non-numeric string values. Disabled for join conditions
            whose right hand side is a column reference.
        quote: Callable rendering a single value as a SQL literal.

    Returns:
        The fragment, starting with its join word.
    """
    if isinstance(condition, RawFragment):
        text = condition.text.strip()
        if not join:
            join = _infer_join(text)
            text = text.removeprefix(OR_MARKER).lstrip()
        return f"{join} {text}"

    if isinstance(condition, FieldValue):
        return _render_field_value(condition, join, escape, quote)

    fragments = []
    for index, (field, value) in enumerate(condition.pairs):
        fragments.append(render_condition(to_condition(field, value), join if index == 0 else None, escape, quote))
    return "".join(fragments)


def parse_condition(
    field: Any,
    value: "Any | EmptyType" = Empty,
    join: Optional[str] = None,
    escape: bool = True,
    quote: Quoter = quote_value,
) -> str:
    """Parse loose caller input straight into a SQL fragment.

    See :func:`to_condition` and :func:`render_condition`.
    """
    return render_condition(to_condition(field, value), join, escape, quote)
