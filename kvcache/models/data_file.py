"""
DataFile - flat append-only arena holding value bytes.
"""

import os
from pathlib import Path
from typing import BinaryIO

from kvcache.models.exceptions import DataReadError


class DataFile:
    """
    Values are appended verbatim in insertion order, with no framing.

    Byte ranges are located exclusively through the index; the file
    itself never records where one value ends and the next begins.
    """

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        self._file: BinaryIO | None = None

    def open(self) -> None:
        """Open the data file for reading and writing, creating it if absent."""
        Path(self.file_path).parent.mkdir(parents=True, exist_ok=True)
        Path(self.file_path).touch(exist_ok=True)
        self._file = open(self.file_path, "r+b")

    def is_open(self) -> bool:
        return self._file is not None

    def _require_open(self) -> BinaryIO:
        if self._file is None:
            raise RuntimeError("Data file is not open")
        return self._file

    def append(self, value: bytes) -> int:
        """
        Write value at the end of the file.

        Returns:
            The position the value was written at.
        """
        f = self._require_open()
        position = f.seek(0, os.SEEK_END)
        f.write(value)
        f.flush()
        return position

    def read_at(self, position: int, size: int) -> bytes:
        """
        Read exactly size bytes starting at position.

        Raises:
            DataReadError: If the file ends before size bytes were read.
        """
        f = self._require_open()
        f.seek(position)
        data = f.read(size)
        if len(data) < size:
            raise DataReadError(position=position, size=size, got=len(data))
        return data

    def truncate(self) -> None:
        f = self._require_open()
        f.truncate(0)
        f.seek(0)
        f.flush()

    def size(self) -> int:
        f = self._require_open()
        return f.seek(0, os.SEEK_END)

    def sync(self) -> None:
        """Flush to the OS and force the data onto disk."""
        f = self._require_open()
        f.flush()
        _sync_data = getattr(os, "fdatasync", os.fsync)
        _sync_data(f.fileno())

    def close(self) -> None:
        """Close the data file. Safe to call more than once."""
        if self._file:
            f, self._file = self._file, None
            f.close()
