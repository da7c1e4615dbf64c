"""The :class:`Sparrow` facade: statement building, execution, caching and stats."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from sparrowsql.cache import CacheGate, create_cache
from sparrowsql.core.builder import StatementBuilder
from sparrowsql.driver import DriverAdapterBase, ExecutionResult, create_driver
from sparrowsql.exceptions import ExecutionError, ImproperConfigurationError
from sparrowsql.mapping import get_entity_mapping
from sparrowsql.observability import StatsCollector
from sparrowsql.typing import Empty
from sparrowsql.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from typing_extensions import Self

    from sparrowsql.cache import CacheBackend
    from sparrowsql.config import SparrowConfig, SparrowFactory
    from sparrowsql.driver import DriverSpec
    from sparrowsql.observability import QueryStats
    from sparrowsql.typing import DictRow

__all__ = ("Sparrow",)

logger = get_logger("base")


class Sparrow(StatementBuilder):
    """Fluent SQL builder bound to a database connection and a result cache.

    Example::

        db = Sparrow("sqlite:///app.db")
        db.from_("user").where("id", 123).one()
        # {'id': 123, 'name': 'bob', ...}

    Args:
        db: Connection URL, descriptor, mapping or live connection.
        cache: Cache path, URL, descriptor, backend or live client.
        config: Behaviour switches applied after construction.
    """

    def __init__(
        self,
        db: "Optional[DriverSpec]" = None,
        cache: Any = None,
        config: "Optional[SparrowConfig]" = None,
    ) -> None:
        super().__init__()
        self.last_query: Optional[str] = None
        self.num_rows: Optional[int] = None
        self.insert_id: Any = None
        self.affected_rows: Optional[int] = None
        self.is_cached = False
        self.cache_enabled = False
        self.show_sql = False
        self.default_expire = 0
        self._stats = StatsCollector()
        self._cache = CacheGate()
        self._key_prefix: Optional[str] = None
        self._entity_type: Optional[type] = None
        if db is not None:
            self.set_db(db)
        if cache is not None:
            self.set_cache(cache)
        if config is not None:
            config.apply(self)

    @classmethod
    def factory(cls) -> "SparrowFactory":
        """Return a fluent factory producing a configured instance."""
        from sparrowsql.config import SparrowFactory

        return SparrowFactory()

    @property
    def key_prefix(self) -> Optional[str]:
        """Prefix prepended to every cache key."""
        return self._key_prefix

    @key_prefix.setter
    def key_prefix(self, prefix: Optional[str]) -> None:
        self._key_prefix = prefix
        self._cache.key_prefix = prefix or ""

    @property
    def stats_enabled(self) -> bool:
        return self._stats.enabled

    @stats_enabled.setter
    def stats_enabled(self, enabled: bool) -> None:
        self._stats.enabled = enabled

    # Connection

    def set_db(self, db: "DriverSpec") -> "Self":
        """Set the active connection.

        The previous connection is dropped without being closed.

        Raises:
            ImproperConfigurationError: If ``db`` does not describe a supported backend.
            ConnectionError: If the backend cannot be reached.
        """
        self._driver = create_driver(db)
        return self

    def get_db(self) -> Any:
        """Return the native connection handle, or ``None`` when unset."""
        return self._driver.connection if self._driver is not None else None

    def get_driver(self) -> "Optional[DriverAdapterBase]":
        return self._driver

    def get_db_type(self) -> Optional[str]:
        """Return the active backend kind, e.g. ``"sqlite"``."""
        return str(self._driver.kind) if self._driver is not None else None

    def _require_db(self) -> DriverAdapterBase:
        if self._driver is None:
            msg = "Database is not defined."
            raise ImproperConfigurationError(msg)
        return self._driver

    # Execution

    def execute(self, key: Optional[str] = None) -> ExecutionResult:
        """Execute the current SQL statement.

        With ``key`` and caching enabled, a cached entry is returned instead of
        running the statement.

        Args:
            key: Cache key.

        Raises:
            ImproperConfigurationError: If no connection is set.
            ExecutionError: If the backend rejects the statement.

        Returns:
            The normalized execution result.
        """
        driver = self._require_db()
        if key is not None and self.cache_enabled:
            cached = self.fetch(key)
            if self.is_cached:
                rows = cached if isinstance(cached, list) else [cached]
                return ExecutionResult(rows, 0, None, len(rows), True)

        self.is_cached = False
        self.num_rows = None
        self.affected_rows = None
        self.insert_id = None
        sql = self.sql()
        self.last_query = sql
        started = self._stats.start()

        result = ExecutionResult([], 0, None, None, False)
        if sql:
            logger.debug("Executing statement", extra={"extra_fields": {"sql": sql, "driver": str(driver.kind)}})
            try:
                result = driver.execute(sql)
            except ExecutionError as e:
                raise ExecutionError(e.detail, sql=sql if self.show_sql else None) from e
            self.num_rows = result.num_rows
            self.affected_rows = result.rows_affected
            self.insert_id = result.last_insert_id

        self._stats.record(sql, started, self.num_rows, self.affected_rows)
        return result

    def many(self, key: Optional[str] = None) -> "list[DictRow]":
        """Fetch every row of the current statement, selecting ``*`` when none is built.

        Rows read live are stored under ``key`` when one is given.
        """
        self._require_db()
        if not self.sql():
            self.select()

        lookup_key = key if self.cache_enabled else None
        rows, self.is_cached = self._cache.run_with_cache(lookup_key, self._live_rows, self.default_expire)
        if self.is_cached:
            self.num_rows = len(rows)
            self._stats.record_cache_hit(self._cache.full_key(str(key)), self.sql())
        elif key is not None and lookup_key is None:
            self._cache.store_quietly(key, rows, self.default_expire)
        return rows

    def _live_rows(self) -> "list[DictRow]":
        result = self.execute()
        self.num_rows = len(result.rows)
        return result.rows

    def one(self, key: Optional[str] = None) -> "DictRow":
        """Fetch the first row, or an empty dict when there is none."""
        if not self.sql():
            self.limit(1).select()
        rows = self.many(key)
        return rows[0] if rows else {}

    def value(self, name: str, key: Optional[str] = None) -> Any:
        """Fetch one column of the first row, or ``None`` when there is no row."""
        row = self.one(key)
        return row.get(name) if row else None

    # Aggregates

    def min(self, field: str, key: Optional[str] = None) -> Any:
        return self.select(f"MIN({field}) min_value").value("min_value", key)

    def max(self, field: str, key: Optional[str] = None) -> Any:
        return self.select(f"MAX({field}) max_value").value("max_value", key)

    def sum(self, field: str, key: Optional[str] = None) -> int:
        return int(self.select(f"SUM({field}) sum_value").value("sum_value", key) or 0)

    def avg(self, field: str, key: Optional[str] = None) -> float:
        return float(self.select(f"AVG({field}) avg_value").value("avg_value", key) or 0)

    def count(self, field: str = "*", key: Optional[str] = None) -> int:
        return int(self.select(f"COUNT({field}) num_rows").value("num_rows", key) or 0)

    # Cache

    def set_cache(self, cache: Any) -> "Self":
        """Set the result cache.

        Raises:
            ImproperConfigurationError: If ``cache`` is not a supported cache.
        """
        self._cache = CacheGate(create_cache(cache), self._key_prefix or "")
        return self

    def get_cache(self) -> "CacheBackend":
        return self._cache.backend

    def get_cache_type(self) -> str:
        return self._cache.kind

    def store(self, key: str, value: Any, expire: int = 0) -> None:
        """Store ``value`` under the prefixed ``key``; ``expire`` is seconds, ``0`` never expires."""
        self._cache.store(key, value, expire)

    def fetch(self, key: str, default: Any = None) -> Any:
        """Fetch a cached value.

        :attr:`is_cached` tells whether the key was found; ``default`` is
        returned on a miss.
        """
        value = self._cache.fetch(key)
        self.is_cached = value is not Empty
        return default if value is Empty else value

    def clear(self, key: str) -> bool:
        return self._cache.clear(key)

    def flush(self) -> None:
        self._cache.flush()

    # Stats

    def get_stats(self) -> "QueryStats":
        """Return the statement log with totals computed on this call."""
        return self._stats.snapshot()

    def reset_stats(self) -> None:
        self._stats.reset()

    # Objects

    def using(self, entity_type: Any) -> "Self":
        """Select the entity class for :meth:`find`, clearing pending clauses.

        Args:
            entity_type: A registered entity class, or an instance of one.
        """
        self._entity_type = entity_type if isinstance(entity_type, type) else type(entity_type)
        return self.reset()

    def find(self, value: Any = None, key: Optional[str] = None) -> Any:
        """Load entities of the class selected with :meth:`using`.

        Args:
            value: An ``int`` matches the id column, a ``str`` the name column and
                a mapping is added as WHERE conditions.
            key: Cache key.

        Raises:
            ImproperConfigurationError: If no entity class is selected.

        Returns:
            The entity when exactly one row matches, otherwise a list of entities.
        """
        if self._entity_type is None:
            msg = "Class is not defined."
            raise ImproperConfigurationError(msg)
        entity_type = self._entity_type
        mapping = get_entity_mapping(entity_type)
        self.from_(mapping.table, reset=False)

        if isinstance(value, int) and not isinstance(value, bool):
            self.where(mapping.id_field, value)
        elif isinstance(value, str) and mapping.name_field:
            self.where(mapping.name_field, value)
        elif isinstance(value, Mapping):
            self.where(value)

        if not self.sql():
            self.select()
        objects = [mapping.load(entity_type, row) for row in self.many(key)]
        return objects[0] if len(objects) == 1 else objects

    def save(self, instance: Any, fields: "Optional[Sequence[str]]" = None) -> Any:
        """Insert ``instance`` when its id is ``None``, otherwise update it.

        Args:
            instance: Entity to persist. A new entity gets the generated id assigned.
            fields: Columns to update; all non-id columns when omitted.

        Returns:
            The entity.
        """
        self.using(instance)
        mapping = get_entity_mapping(type(instance))
        self.from_(mapping.table)

        data = mapping.dump(instance)
        identity = data.pop(mapping.id_field, None)
        if identity is None:
            self.insert(data).execute()
            setattr(instance, mapping.id_field, self.insert_id)
        else:
            if fields:
                data = {column: value for column, value in data.items() if column in fields}
            self.where(mapping.id_field, identity).update(data).execute()
        return instance

    def remove(self, instance: Any) -> None:
        """Delete the row of ``instance``; entities without an id are ignored."""
        self.using(instance)
        mapping = get_entity_mapping(type(instance))
        self.from_(mapping.table)
        identity = mapping.identity(instance)
        if identity is not None:
            self.where(mapping.id_field, identity).delete().execute()

    def __repr__(self) -> str:
        return f"Sparrow(driver={self._driver!r}, cache={self._cache!r})"
