"""
KVCache - persistent, append-only key-value cache.
"""

import logging
import os
import threading

from kvcache.engine.recoverer import IndexRecoverer
from kvcache.models.data_file import DataFile
from kvcache.models.exceptions import DataSizeError, KeyExistsError
from kvcache.models.index_entry import (
    DATA_SIZE_LIMIT,
    IndexEntry,
    check_key_size,
    to_key_bytes,
)
from kvcache.models.index_file import IndexFile
from kvcache.models.stat import Stat


class KVCache:
    """
    Embedded, persistent key-value cache backed by two files in a folder.

    Provides:
    - put(key, value): Insert a new key-value pair (no overwrite)
    - get(key): Retrieve a value, None if absent
    - clear(): Remove every key-value pair
    - stat() / len(): Size introspection

    Architecture:
    - Values are appended to the data file, never moved or rewritten
    - Every put appends a (key, position, size) record to the index file
    - The index is replayed into memory on open; reads consult only the
      in-memory map plus one positioned read from the data file
    - A version tag is stored in the index header. Opening with a
      different version wipes the cache.

    A single process must own the folder. Concurrent threads within that
    process are serialized by one lock; there is no cross-process locking.
    """

    INDEX_NAME = "index"
    DATA_NAME = "data"

    def __init__(self, folder: str | os.PathLike, version: str | bytes, sync: bool = False) -> None:
        """
        Prepare a cache handle. Use KVCache.open() to get a ready instance.

        Args:
            folder: Directory holding the index and data files.
            version: Version of the cached data. A persisted cache with a
                     different version is cleared on open.
            sync: If True, fsync both files after every put and clear.

        Raises:
            KeySizeError: If version is longer than KEY_SIZE_LIMIT bytes.
            ValueError: If folder is empty.
        """
        version_bytes = to_key_bytes(version)
        check_key_size(version_bytes)

        folder = os.fspath(folder)
        if not folder or not folder.strip():
            raise ValueError("folder cannot be empty")

        self._folder = folder
        self._version = version_bytes
        self._sync = sync

        self._index_file = IndexFile(os.path.join(folder, self.INDEX_NAME))
        self._data_file = DataFile(os.path.join(folder, self.DATA_NAME))

        self._index_map: dict[bytes, IndexEntry] = {}

        # Guards the map and both file cursors
        self._lock = threading.Lock()

    @classmethod
    def open(cls, folder: str | os.PathLike, version: str | bytes, sync: bool = False) -> "KVCache":
        """
        Open (or create) the cache persisted in folder.

        Args:
            folder: Directory holding the cache files; created if absent.
            version: Version of the cached data.
            sync: If True, fsync both files after every put and clear.

        Returns:
            Ready KVCache instance.
        """
        cache = cls(folder, version, sync=sync)
        try:
            cache._initialize()
        except BaseException:
            cache.close()
            raise
        return cache

    def _initialize(self) -> None:
        """Open both files and load or reset the index."""
        os.makedirs(self._folder, exist_ok=True)

        self._index_file.open()
        self._data_file.open()

        stored_version = self._index_file.read_version()

        with self._lock:
            if stored_version is None:
                if self._index_file.size() > 0:
                    logging.warning(f"Corrupt index header in {self._folder}, clearing cache")
                else:
                    logging.info(f"Creating new cache in {self._folder}")
                self._reset()
            elif stored_version != self._version:
                logging.warning(
                    f"Cache version mismatch in {self._folder}: "
                    f"stored {stored_version!r}, requested {self._version!r}. Clearing cache"
                )
                self._reset()
            else:
                self._index_map = IndexRecoverer().recover(self._index_file)
                logging.info(f"Opened cache in {self._folder} with {len(self._index_map)} entries")

    def _reset(self) -> None:
        """Truncate both files and rewrite the version header. Lock must be held."""
        self._index_file.reset(self._version)
        self._data_file.truncate()
        self._index_map = {}
        self._maybe_sync()

    def _maybe_sync(self) -> None:
        if self._sync:
            self._data_file.sync()
            self._index_file.sync()

    def _check_open(self) -> None:
        if not (self._index_file.is_open() and self._data_file.is_open()):
            raise RuntimeError("Cache is closed")

    @property
    def folder(self) -> str:
        return self._folder

    @property
    def version(self) -> bytes:
        return self._version

    def get(self, key: str | bytes) -> bytes | None:
        """
        Retrieve the value stored under key.

        Args:
            key: The key to look up.

        Returns:
            The value if found, None otherwise.

        Raises:
            DataReadError: If the data file is shorter than the index claims.
        """
        key_bytes = to_key_bytes(key)

        with self._lock:
            self._check_open()

            entry = self._index_map.get(key_bytes)
            if entry is None:
                return None

            return self._data_file.read_at(entry.position, entry.size)

    def put(self, key: str | bytes, value: bytes) -> None:
        """
        Insert a new key-value pair.

        The value is appended to the data file before its index record is
        written, so a crash in between can only orphan data bytes.

        Args:
            key: The key to insert.
            value: The value to store.

        Raises:
            KeySizeError: If key is longer than KEY_SIZE_LIMIT bytes.
            KeyExistsError: If key is already in the cache.
            DataSizeError: If the value would push the data file past
                           DATA_SIZE_LIMIT bytes.
        """
        key_bytes = to_key_bytes(key)
        check_key_size(key_bytes)
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"value must be bytes-like, got {type(value).__name__}")
        value = bytes(value)

        with self._lock:
            self._check_open()

            if key_bytes in self._index_map:
                raise KeyExistsError(key_bytes)

            current = self._data_file.size()
            if current + len(value) > DATA_SIZE_LIMIT:
                raise DataSizeError(current=current, value_size=len(value), limit=DATA_SIZE_LIMIT)

            position = self._data_file.append(value)
            entry = IndexEntry(key=key_bytes, position=position, size=len(value))
            self._index_file.append(entry)
            self._maybe_sync()

            self._index_map[key_bytes] = entry

    def clear(self) -> None:
        """Remove all key-value pairs from the cache."""
        with self._lock:
            self._check_open()
            self._reset()
        logging.debug(f"Cleared cache in {self._folder}")

    def stat(self) -> Stat:
        """
        Snapshot of entry count and file sizes.

        Sizes are read from the current end offsets of the files.
        """
        with self._lock:
            self._check_open()
            return Stat(
                count=len(self._index_map),
                index_bytes=self._index_file.size(),
                data_bytes=self._data_file.size(),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._index_map)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, bytes, bytearray, memoryview)):
            return False
        key_bytes = to_key_bytes(key)
        with self._lock:
            return key_bytes in self._index_map

    def close(self) -> None:
        """
        Close the cache, releasing both files.

        Safe to call on a partially opened cache and more than once. If
        both files fail to close, the first error is raised.
        """
        errors: list[Exception] = []

        for f in (self._index_file, self._data_file):
            if not f.is_open():
                continue
            try:
                if self._sync:
                    f.sync()
            except OSError as e:
                errors.append(e)
            try:
                f.close()
            except OSError as e:
                errors.append(e)

        if errors:
            raise errors[0]
        logging.debug(f"Closed cache in {self._folder}")

    def __enter__(self) -> "KVCache":
        if not (self._index_file.is_open() and self._data_file.is_open()):
            try:
                self._initialize()
            except BaseException:
                self.close()
                raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"KVCache(folder={self._folder!r}, version={self._version!r})"

