"""Literal quoting for values inlined into SQL text.

Values are escaped by the active driver when one is attached, otherwise by a
dialect-neutral backslash table.
"""

import datetime
import re
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Final, Optional

if TYPE_CHECKING:
    from sparrowsql.driver import DriverAdapterBase

__all__ = ("escape_string", "is_numeric", "quote_value")

_ESCAPE_TABLE: Final = str.maketrans({
    "\\": "\\\\",
    "\0": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "'": "\\'",
    '"': '\\"',
    "\x1a": "\\Z",
})

NUMERIC_PATTERN: Final = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def is_numeric(value: Any) -> bool:
    """Check whether ``value`` may be inlined as a bare numeric literal.

    Strings only qualify when the whole string is a decimal number literal; no
    surrounding whitespace, hex or ``inf``/``nan`` spellings are accepted.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, Decimal)):
        return True
    if isinstance(value, float):
        return value == value and value not in {float("inf"), float("-inf")}
    if isinstance(value, str):
        return NUMERIC_PATTERN.fullmatch(value) is not None
    return False


def escape_string(value: str) -> str:
    """Escape and single-quote ``value`` with the generic backslash table."""
    return f"'{value.translate(_ESCAPE_TABLE)}'"


def quote_value(value: Any, driver: "Optional[DriverAdapterBase]" = None) -> str:
    """Render ``value`` as a SQL literal.

    Args:
        value: The value to render.
        driver: Active driver whose dialect escapes strings. Without one the
            generic backslash table is used.

    Returns:
        The literal as SQL text.
    """
    if value is None:
        return "NULL"
    if isinstance(value, str):
        if driver is not None:
            return driver.quote(value)
        return escape_string(value)
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return quote_value(value.isoformat(), driver)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"X'{bytes(value).hex()}'"
    return str(value)
