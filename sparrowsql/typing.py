from enum import Enum
from typing import Any, Final, Literal, Union

from msgspec import UnsetType
from typing_extensions import TypeAlias, TypeVar

__all__ = ("DictRow", "Empty", "EmptyType", "EntityT")


class _EmptyEnum(Enum):
    """A sentinel enum used as placeholder."""

    EMPTY = 0


EmptyType = Union[Literal[_EmptyEnum.EMPTY], UnsetType]
Empty: Final = _EmptyEnum.EMPTY

DictRow: TypeAlias = dict[str, Any]
"""One normalized result row, keyed in select-list order."""
EntityT = TypeVar("EntityT")
