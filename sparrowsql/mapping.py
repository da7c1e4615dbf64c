"""Row to object mapping for :meth:`Sparrow.find`, :meth:`Sparrow.save` and :meth:`Sparrow.remove`.

Entities declare their table and key columns explicitly, either with the
:func:`entity` decorator or :func:`register_entity`::

    @entity("user", id_field="id", name_field="name")
    @dataclass
    class User:
        id: Optional[int] = None
        name: str = ""

Dataclasses convert to and from rows through their fields. Any other class
must supply ``from_row`` and ``to_row`` callables.
"""

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Optional

from sparrowsql.exceptions import ImproperConfigurationError
from sparrowsql.typing import DictRow, EntityT

__all__ = ("EntityMapping", "entity", "get_entity_mapping", "register_entity")

_ENTITY_MAPPINGS: "dict[type, EntityMapping]" = {}


@dataclass(frozen=True, slots=True)
class EntityMapping:
    """Where and how an entity type is stored.

    Attributes:
        table: Table holding the rows.
        id_field: Primary key column; ``None`` on an entity means "not inserted yet".
        name_field: Column matched when :meth:`Sparrow.find` receives a string.
        from_row: Builds an entity from a row.
        to_row: Returns the column values of an entity.
    """

    table: str
    id_field: str = "id"
    name_field: Optional[str] = None
    from_row: "Optional[Callable[[DictRow], Any]]" = None
    to_row: "Optional[Callable[[Any], Mapping[str, Any]]]" = None

    def load(self, entity_type: "type[EntityT]", row: "DictRow") -> "EntityT":
        """Build an ``entity_type`` instance from ``row``, ignoring unknown columns.

        Raises:
            ImproperConfigurationError: If no ``from_row`` is set and ``entity_type`` is not a dataclass.
        """
        if self.from_row is not None:
            return self.from_row(row)
        if not dataclasses.is_dataclass(entity_type):
            msg = f"{entity_type.__name__} needs a from_row converter."
            raise ImproperConfigurationError(msg)
        names = {f.name for f in dataclasses.fields(entity_type) if f.init}
        return entity_type(**{key: value for key, value in row.items() if key in names})

    def dump(self, instance: Any) -> "DictRow":
        """Column values of ``instance``, id included.

        Raises:
            ImproperConfigurationError: If no ``to_row`` is set and ``instance`` is not a dataclass.
        """
        if self.to_row is not None:
            return dict(self.to_row(instance))
        if not dataclasses.is_dataclass(instance) or isinstance(instance, type):
            msg = f"{type(instance).__name__} needs a to_row converter."
            raise ImproperConfigurationError(msg)
        return {f.name: getattr(instance, f.name) for f in dataclasses.fields(instance)}

    def identity(self, instance: Any) -> Any:
        return self.dump(instance).get(self.id_field)


def register_entity(entity_type: type, mapping: EntityMapping) -> EntityMapping:
    """Attach ``mapping`` to ``entity_type`` and its subclasses."""
    _ENTITY_MAPPINGS[entity_type] = mapping
    return mapping


def get_entity_mapping(entity_type: type) -> EntityMapping:
    """Look up the mapping registered for ``entity_type`` or its nearest base class.

    Raises:
        ImproperConfigurationError: If no mapping is registered.
    """
    for candidate in entity_type.__mro__:
        mapping = _ENTITY_MAPPINGS.get(candidate)
        if mapping is not None:
            return mapping
    msg = f"No entity mapping registered for {entity_type.__name__}."
    raise ImproperConfigurationError(msg)


def entity(
    table: str,
    id_field: str = "id",
    name_field: Optional[str] = None,
    from_row: "Optional[Callable[[DictRow], Any]]" = None,
    to_row: "Optional[Callable[[Any], Mapping[str, Any]]]" = None,
) -> "Callable[[type[EntityT]], type[EntityT]]":
    """Class decorator registering an :class:`EntityMapping`."""

    def decorator(entity_type: "type[EntityT]") -> "type[EntityT]":
        register_entity(entity_type, EntityMapping(table, id_field, name_field, from_row, to_row))
        return entity_type

    return decorator
