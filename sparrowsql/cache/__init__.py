"""Pluggable result caching."""

from sparrowsql.cache.backends import CacheBackend, ClientCache, FileCache, MemcachedCache, MemoryCache
from sparrowsql.cache.gate import CacheGate
from sparrowsql.cache.registry import CACHE_KINDS, create_cache

__all__ = (
    "CACHE_KINDS",
    "CacheBackend",
    "CacheGate",
    "ClientCache",
    "FileCache",
    "MemcachedCache",
    "MemoryCache",
    "create_cache",
)
