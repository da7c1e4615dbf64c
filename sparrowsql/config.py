"""Facade configuration and the fluent factory."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from typing_extensions import Self

    from sparrowsql.base import Sparrow

__all__ = ("SparrowConfig", "SparrowFactory")


@dataclass(slots=True)
class SparrowConfig:
    """Behaviour switches of a :class:`~sparrowsql.base.Sparrow` instance.

    Attributes:
        enable_cache: Serve keyed reads from the cache when an entry exists.
        key_prefix: Prepended to every cache key.
        show_sql: Append the failing SQL to execution errors.
        enable_stats: Record timings of executed statements.
        default_expire: Expiry in seconds for rows stored by keyed reads; ``0`` never expires.
    """

    enable_cache: bool = False
    key_prefix: Optional[str] = None
    show_sql: bool = False
    enable_stats: bool = False
    default_expire: int = 0

    def apply(self, sparrow: "Sparrow") -> "Sparrow":
        """Copy these settings onto ``sparrow``."""
        sparrow.cache_enabled = self.enable_cache
        sparrow.key_prefix = self.key_prefix
        sparrow.show_sql = self.show_sql
        sparrow.stats_enabled = self.enable_stats
        sparrow.default_expire = self.default_expire
        return sparrow


class SparrowFactory:
    """Fluent builder for a configured :class:`~sparrowsql.base.Sparrow`.

    Example::

        sparrow = Sparrow.factory().enable_cache().set_cache_key_prefix("app:").get_result()
    """

    __slots__ = ("_sparrow",)

    def __init__(self) -> None:
        self._sparrow: "Optional[Sparrow]" = None

    def get_result(self) -> "Sparrow":
        """Return the instance being configured, creating it on first use."""
        if self._sparrow is None:
            from sparrowsql.base import Sparrow

            self._sparrow = Sparrow()
        return self._sparrow

    def enable_cache(self) -> "Self":
        self.get_result().cache_enabled = True
        return self

    def disable_cache(self) -> "Self":
        self.get_result().cache_enabled = False
        return self

    def set_cache_key_prefix(self, prefix: Optional[str]) -> "Self":
        self.get_result().key_prefix = prefix
        return self

    def show_sql_on_errors(self, show: bool = True) -> "Self":
        self.get_result().show_sql = show
        return self

    def enable_stats(self) -> "Self":
        self.get_result().stats_enabled = True
        return self

    def disable_stats(self) -> "Self":
        self.get_result().stats_enabled = False
        return self
