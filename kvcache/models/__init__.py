"""
Data models for the cache store.
"""

from kvcache.models.data_file import DataFile
from kvcache.models.index_entry import DATA_SIZE_LIMIT, KEY_SIZE_LIMIT, IndexEntry
from kvcache.models.index_file import IndexFile
from kvcache.models.stat import Stat

__all__ = [
    "DATA_SIZE_LIMIT",
    "KEY_SIZE_LIMIT",
    "IndexEntry",
    "IndexFile",
    "DataFile",
    "Stat",
]
