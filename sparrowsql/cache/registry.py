"""Cache dispatch: build a backend from a path, URL, descriptor or live client."""

from collections.abc import Mapping
from typing import Any, Final
from urllib.parse import urlsplit

from sparrowsql.cache.backends import CacheBackend, ClientCache, FileCache, MemcachedCache, MemoryCache
from sparrowsql.exceptions import ImproperConfigurationError

__all__ = ("CACHE_KINDS", "create_cache")

CACHE_KINDS: Final = frozenset({"memory", "array", "file", "memcache", "memcached"})


def _from_url(url: str) -> "dict[str, Any]":
    scheme, separator, remainder = url.replace("\\", "/").partition("://")
    if not separator or not scheme:
        msg = "Invalid cache type."
        raise ImproperConfigurationError(msg)
    kind = scheme.lower()
    if kind in {"file", "memory", "array"}:
        return {"kind": kind, "path": remainder}
    try:
        parts = urlsplit(f"{kind}://{remainder}")
        port = parts.port
    except ValueError as e:
        msg = f"Invalid cache string: {e}"
        raise ImproperConfigurationError(msg) from e
    return {"kind": kind, "host": parts.hostname, "port": port}


def _from_mapping(config: "Mapping[str, Any]") -> CacheBackend:
    kind = str(config.get("kind") or config.get("type") or "").lower()
    if kind not in CACHE_KINDS:
        msg = "Invalid cache type."
        raise ImproperConfigurationError(msg)
    if kind in {"memory", "array"}:
        return MemoryCache()
    if kind == "file":
        path = config.get("path") or config.get("directory")
        if not path:
            msg = "File cache requires a directory path."
            raise ImproperConfigurationError(msg)
        return FileCache(path)
    port = config.get("port")
    return MemcachedCache(
        host=config.get("host") or config.get("hostname") or "localhost",
        port=int(port) if port not in {None, ""} else None,
    )


def create_cache(spec: Any) -> CacheBackend:
    """Build a cache backend.

    Args:
        spec: One of

            * a directory path starting with ``.`` or ``/`` for a :class:`FileCache`;
            * a URL such as ``memory://``, ``file:///tmp/cache`` or
              ``memcached://host:11211``;
            * a mapping with ``kind`` (or ``type``) plus ``host``/``port`` or ``path``;
            * a :class:`CacheBackend` instance, returned unchanged;
            * a live client with ``get``, ``set`` and ``delete`` methods.

    Raises:
        ImproperConfigurationError: If ``spec`` is none of the above.

    Returns:
        The cache backend.
    """
    if isinstance(spec, str):
        if spec.startswith((".", "/")):
            return FileCache(spec)
        return _from_mapping(_from_url(spec))
    if isinstance(spec, Mapping):
        return _from_mapping(spec)
    if isinstance(spec, CacheBackend):
        return spec
    if all(callable(getattr(spec, name, None)) for name in ("get", "set", "delete")):
        return ClientCache(spec)
    msg = "Invalid cache type."
    raise ImproperConfigurationError(msg)
