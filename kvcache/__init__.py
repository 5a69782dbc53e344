"""
Embedded, persistent, append-only key-value cache.

This package provides a file-backed cache for expensive-to-reproduce data:
- put(key, value) - append to the data file and the index, no overwrite
- get(key) - O(1) in-memory lookup plus one positioned read
- clear() - wipe the whole cache
- stat() / len() - size introspection

Opening a cache with a different version than the persisted one clears it.
"""

from kvcache.engine.async_cache import AsyncKVCache
from kvcache.engine.cache import KVCache
from kvcache.models.exceptions import (
    DataReadError,
    DataSizeError,
    IndexCorruptionError,
    KeyExistsError,
    KeySizeError,
    KVCacheError,
)
from kvcache.models.index_entry import DATA_SIZE_LIMIT, KEY_SIZE_LIMIT, IndexEntry
from kvcache.models.stat import Stat

__all__ = [
    "KVCache",
    "AsyncKVCache",
    "Stat",
    "IndexEntry",
    "KEY_SIZE_LIMIT",
    "DATA_SIZE_LIMIT",
    "KVCacheError",
    "KeySizeError",
    "DataSizeError",
    "KeyExistsError",
    "IndexCorruptionError",
    "DataReadError",
]
