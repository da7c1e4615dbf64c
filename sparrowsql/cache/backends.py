"""Key-value cache backends for query results.

Components:
- CacheBackend: Protocol every backend satisfies
- MemoryCache: In-process dictionary with optional expiry
- FileCache: One MessagePack file per key in a directory
- MemcachedCache: memcached server through pymemcache
- ClientCache: Caller supplied live cache client
"""

import hashlib
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Optional, Protocol, Union, runtime_checkable

from mypy_extensions import mypyc_attr

from sparrowsql._serialization import decode_msgpack, encode_msgpack
from sparrowsql.exceptions import CacheError, MissingDependencyError, SerializationError
from sparrowsql.typing import Empty
from sparrowsql.utils.logging import get_logger

if TYPE_CHECKING:
    from sparrowsql.typing import EmptyType

__all__ = (
    "DEFAULT_MEMCACHED_PORT",
    "CacheBackend",
    "ClientCache",
    "FileCache",
    "MemcachedCache",
    "MemoryCache",
    "expiry_epoch",
)

logger = get_logger("cache")

DEFAULT_MEMCACHED_PORT: Final = 11211


def expiry_epoch(expire: int, now: Optional[float] = None) -> int:
    """Absolute expiry for an ``expire`` hint in seconds; ``0`` means never."""
    if expire <= 0:
        return 0
    return int(now if now is not None else time.time()) + int(expire)


def _is_expired(expires_at: float, now: Optional[float] = None) -> bool:
    return bool(expires_at) and (now if now is not None else time.time()) >= expires_at


@runtime_checkable
class CacheBackend(Protocol):
    """Capability set of a result cache."""

    kind: str

    def get(self, key: str) -> "Union[Any, EmptyType]":
        """Return the stored value, or ``Empty`` on a miss."""
        ...

    def set(self, key: str, value: Any, expire: int = 0) -> None:
        """Store ``value``; ``expire`` is seconds, ``0`` for no expiry."""
        ...

    def delete(self, key: str) -> bool:
        """Remove ``key``, returning whether it was present."""
        ...

    def flush(self) -> None:
        """Remove every stored entry."""
        ...


@mypyc_attr(allow_interpreted_subclasses=False)
class MemoryCache:
    """Dictionary backed cache living as long as the process."""

    __slots__ = ("_entries",)

    kind = "memory"

    def __init__(self) -> None:
        self._entries: dict[str, tuple[Any, int]] = {}

    def get(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return Empty
        value, expires_at = entry
        if _is_expired(expires_at):
            return Empty
        return value

    def set(self, key: str, value: Any, expire: int = 0) -> None:
        self._entries[key] = (value, expiry_epoch(expire))

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, Empty) is not Empty

    def flush(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class FileCache:
    """Directory backed cache.

    Each key is stored in a file named by the md5 hex digest of the key. The
    payload is a MessagePack map ``{"value": ..., "expire": epoch_or_0}``.
    Expired entries read as misses and are left on disk until overwritten,
    cleared or flushed.
    """

    __slots__ = ("path",)

    kind = "file"

    def __init__(self, path: "Union[str, Path]") -> None:
        self.path = Path(path)

    def _file_for(self, key: str) -> Path:
        return self.path / hashlib.md5(key.encode("utf-8"), usedforsecurity=False).hexdigest()

    def get(self, key: str) -> Any:
        target = self._file_for(key)
        if not target.is_file():
            return Empty
        try:
            payload = decode_msgpack(target.read_bytes())
        except (OSError, SerializationError) as e:
            msg = f"Unable to read cache file {target}: {e}"
            raise CacheError(msg) from e
        if not isinstance(payload, dict):
            msg = f"Unable to read cache file {target}: not a cache entry"
            raise CacheError(msg)
        if _is_expired(payload.get("expire", 0)):
            return Empty
        return payload.get("value")

    def set(self, key: str, value: Any, expire: int = 0) -> None:
        """Write the entry, creating the cache directory if needed.

        Raises:
            CacheError: If the file cannot be written.
            SerializationError: If ``value`` cannot be encoded.
        """
        payload = encode_msgpack({"value": value, "expire": expiry_epoch(expire)})
        try:
            self.path.mkdir(parents=True, exist_ok=True)
            self._file_for(key).write_bytes(payload)
        except OSError as e:
            msg = f"Unable to write cache file for {key!r}: {e}"
            raise CacheError(msg) from e

    def delete(self, key: str) -> bool:
        target = self._file_for(key)
        if not target.exists():
            return False
        target.unlink()
        return True

    def flush(self) -> None:
        if not self.path.is_dir():
            return
        for entry in self.path.iterdir():
            if entry.is_file():
                entry.unlink()

    def __repr__(self) -> str:
        return f"FileCache(path={str(self.path)!r})"


class ClientCache:
    """Adapter for a live cache client exposing ``get``/``set``/``delete``.

    Flushing calls ``flush_all()`` when the client has it, else ``flush()``.
    Clients that cannot tell a miss apart from a stored ``None`` report both
    as misses.
    """

    __slots__ = ("client",)

    kind = "client"

    def __init__(self, client: Any) -> None:
        self.client = client

    def get(self, key: str) -> Any:
        value = self.client.get(key)
        return Empty if value is None else value

    def set(self, key: str, value: Any, expire: int = 0) -> None:
        self.client.set(key, value, expire=expire)

    def delete(self, key: str) -> bool:
        return bool(self.client.delete(key))

    def flush(self) -> None:
        flush = getattr(self.client, "flush_all", None) or self.client.flush
        flush()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(client={self.client!r})"


class MemcachedCache(ClientCache):
    """memcached server accessed with pymemcache.

    Values are serialized as MessagePack so result rows, ``bytes`` included,
    survive the round trip.
    """

    __slots__ = ()

    kind = "memcached"

    def __init__(self, host: str = "localhost", port: Optional[int] = None, client: Any = None) -> None:
        if client is None:
            client = self._create_client(host, port or DEFAULT_MEMCACHED_PORT)
        super().__init__(client)

    @staticmethod
    def _create_client(host: str, port: int) -> Any:
        try:
            from pymemcache.client.base import Client
        except ImportError as e:
            raise MissingDependencyError(package="pymemcache", install_package="memcached") from e
        logger.debug("Creating memcached client for %s:%s", host, port)
        return Client((host, port))

    def get(self, key: str) -> Any:
        raw = self.client.get(key)
        if raw is None:
            return Empty
        return decode_msgpack(raw)

    def set(self, key: str, value: Any, expire: int = 0) -> None:
        self.client.set(key, encode_msgpack(value), expire=expire)
