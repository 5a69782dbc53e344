"""
Custom exceptions for the cache store.
"""


class KVCacheError(Exception):
    """Base class for errors raised by the cache store itself."""


class KeySizeError(KVCacheError, ValueError):
    """Raised when a key or the version tag exceeds KEY_SIZE_LIMIT bytes."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"key too long: {size} bytes (limit {limit})")


class DataSizeError(KVCacheError, ValueError):
    """
    Raised when storing a value would push the total data size over
    DATA_SIZE_LIMIT. The value is not written.
    """

    def __init__(self, current: int, value_size: int, limit: int):
        self.current = current
        self.value_size = value_size
        self.limit = limit
        super().__init__(
            f"total data too big: {current} + {value_size} bytes exceeds limit {limit}"
        )


class KeyExistsError(KVCacheError, KeyError):
    """Raised when putting a key that is already in the cache."""

    def __init__(self, key: bytes):
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"key already in cache: {self.key!r}"


class IndexCorruptionError(KVCacheError):
    """
    Raised when the index file ends with a partially written record.

    Detected while replaying the index on open; fatal to the open.
    """

    def __init__(self, entry_offset: int, reason: str):
        """
        Initialize corruption error.

        Args:
            entry_offset: File offset of the record being decoded.
            reason: Which part of the record was short.
        """
        self.entry_offset = entry_offset
        self.reason = reason
        super().__init__(f"Index corruption detected at offset {entry_offset}: {reason}")


class DataReadError(KVCacheError, OSError):
    """Raised when the data file holds fewer bytes than an index entry points to."""

    def __init__(self, position: int, size: int, got: int):
        self.position = position
        self.size = size
        self.got = got
        super().__init__(
            f"short read from data file at position {position}: "
            f"expected {size} bytes, got {got}"
        )
