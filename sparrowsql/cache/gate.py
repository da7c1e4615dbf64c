"""Read-through result cache wrapped around statement execution."""

from typing import TYPE_CHECKING, Any, Optional

from sparrowsql.cache.backends import MemoryCache
from sparrowsql.typing import Empty
from sparrowsql.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from sparrowsql.cache.backends import CacheBackend
    from sparrowsql.typing import EmptyType

__all__ = ("CacheGate",)

logger = get_logger("cache.gate")


class CacheGate:
    """Prefixes keys and mediates every cache access of a facade.

    Args:
        backend: Store to use; an in-process :class:`MemoryCache` when omitted.
        key_prefix: Prepended to every key.
    """

    __slots__ = ("backend", "key_prefix")

    def __init__(self, backend: "Optional[CacheBackend]" = None, key_prefix: str = "") -> None:
        self.backend: "CacheBackend" = backend if backend is not None else MemoryCache()
        self.key_prefix = key_prefix

    @property
    def kind(self) -> str:
        return self.backend.kind

    def full_key(self, key: str) -> str:
        """The backend key for ``key``."""
        return f"{self.key_prefix}{key}"

    def fetch(self, key: str) -> "Any | EmptyType":
        """Return the value stored under ``key`` or ``Empty`` on a miss."""
        return self.backend.get(self.full_key(key))

    def store(self, key: str, value: Any, expire: int = 0) -> None:
        self.backend.set(self.full_key(key), value, expire)

    def clear(self, key: str) -> bool:
        return self.backend.delete(self.full_key(key))

    def flush(self) -> None:
        self.backend.flush()

    def run_with_cache(
        self, key: Optional[str], execute: "Callable[[], list[Any]]", expire: int = 0
    ) -> "tuple[list[Any], bool]":
        """Serve rows for ``key`` from the cache, or run ``execute`` and store its rows.

        A failed store is logged and ignored; the live rows are still returned.

        Returns:
            The rows and whether they came from the cache.
        """
        if key is None:
            return execute(), False
        cached = self.fetch(key)
        if cached is not Empty:
            logger.debug("Cache hit for %s", self.full_key(key))
            return cached, True
        rows = execute()
        self.store_quietly(key, rows, expire)
        return rows, False

    def store_quietly(self, key: str, value: Any, expire: int = 0) -> None:
        """Store ``value`` without letting a cache failure reach the caller."""
        try:
            self.store(key, value, expire)
        except Exception as e:  # noqa: BLE001
            logger.warning("Failed to store cache entry %s: %s", self.full_key(key), e)

    def __repr__(self) -> str:
        return f"CacheGate(backend={self.backend!r}, key_prefix={self.key_prefix!r})"
