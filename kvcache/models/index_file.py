import os
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from kvcache.models.exceptions import IndexCorruptionError
from kvcache.models.index_entry import (
    KEY_LEN_SIZE,
    POSITION_SIZE,
    SIZE_SIZE,
    IndexEntry,
    encode_version,
)


class IndexFile:
    """
    Append-only index of key -> (position, size) records.

    The file starts with the version header; every put appends one
    record after it. The file cursor is kept at the end between calls.
    """

    def __init__(self, file_path: str) -> None:
        """
        Initialize IndexFile.

        Args:
            file_path: Path to the index file.
        """
        self.file_path = file_path
        self._file: BinaryIO | None = None
        self._header_size: int = 0

    def open(self) -> None:
        """Open the index file for reading and writing, creating it if absent."""
        Path(self.file_path).parent.mkdir(parents=True, exist_ok=True)
        Path(self.file_path).touch(exist_ok=True)
        self._file = open(self.file_path, "r+b")

    def is_open(self) -> bool:
        return self._file is not None

    def _require_open(self) -> BinaryIO:
        if self._file is None:
            raise RuntimeError("Index file is not open")
        return self._file

    def read_version(self) -> bytes | None:
        """
        Read the version header.

        Returns:
            The stored version tag, or None if the file is empty or the
            header is truncated.
        """
        f = self._require_open()
        f.seek(0)

        length_bytes = f.read(KEY_LEN_SIZE)
        if len(length_bytes) < KEY_LEN_SIZE:
            return None

        length = int.from_bytes(length_bytes, "little")
        version = f.read(length)
        if len(version) < length:
            return None

        self._header_size = KEY_LEN_SIZE + length
        return version

    def reset(self, version: bytes) -> None:
        """Truncate the file and write a fresh version header."""
        f = self._require_open()
        header = encode_version(version)

        f.truncate(0)
        f.seek(0)
        f.write(header)
        f.flush()
        self._header_size = len(header)

    def append(self, entry: IndexEntry) -> None:
        """
        Append a record at the end of the file.

        Raises:
            RuntimeError: If the file is not open.
        """
        f = self._require_open()
        f.seek(0, os.SEEK_END)
        f.write(bytes(entry))
        f.flush()

    def size(self) -> int:
        """Current size of the file in bytes (header plus all records)."""
        f = self._require_open()
        return f.seek(0, os.SEEK_END)

    def sync(self) -> None:
        """Flush to the OS and force the data onto disk."""
        f = self._require_open()
        f.flush()
        # Use fdatasync if available (Linux), fallback to fsync (macOS/Windows)
        _sync_data = getattr(os, "fdatasync", os.fsync)
        _sync_data(f.fileno())

    def close(self) -> None:
        """Close the index file. Safe to call more than once."""
        if self._file:
            f, self._file = self._file, None
            f.close()

    def __iter__(self) -> Iterator[IndexEntry]:
        """Iterate over all records after the version header."""
        f = self._require_open()
        return _IndexIterator(f, self._header_size)

    def __enter__(self) -> "IndexFile":
        if self._file is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class _IndexIterator(Iterator[IndexEntry]):
    """
    Iterator over index records, reading the shared file handle.

    Stops cleanly at end of file; a partially written record raises
    IndexCorruptionError. Leaves the cursor at the end of the file.
    """

    def __init__(self, file: BinaryIO, start: int) -> None:
        self._file = file
        self._file.seek(start)

    def __iter__(self) -> Iterator[IndexEntry]:
        return self

    def __next__(self) -> IndexEntry:
        entry_offset = self._file.tell()

        length_bytes = self._file.read(KEY_LEN_SIZE)
        if not length_bytes:
            raise StopIteration
        if len(length_bytes) < KEY_LEN_SIZE:
            raise IndexCorruptionError(entry_offset, "short key length")

        key_len = int.from_bytes(length_bytes, "little")
        key = self._file.read(key_len)
        if len(key) < key_len:
            raise IndexCorruptionError(entry_offset, "short key")

        location = self._file.read(POSITION_SIZE + SIZE_SIZE)
        if len(location) < POSITION_SIZE + SIZE_SIZE:
            raise IndexCorruptionError(entry_offset, "short position/size")

        return IndexEntry.from_bytes(length_bytes + key + location)
