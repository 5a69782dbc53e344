"""
Tests for data models: IndexEntry, IndexFile, DataFile and Stat.
"""

import os

import pytest

from kvcache.models.data_file import DataFile
from kvcache.models.exceptions import DataReadError, IndexCorruptionError, KeySizeError
from kvcache.models.index_entry import (
    DATA_SIZE_LIMIT,
    KEY_SIZE_LIMIT,
    IndexEntry,
    encode_version,
    to_key_bytes,
)
from kvcache.models.index_file import IndexFile
from kvcache.models.stat import Stat


class TestLimits:
    """Tests for the exposed size limits."""

    def test_limit_values(self):
        assert KEY_SIZE_LIMIT == 65535
        assert DATA_SIZE_LIMIT == 4294967295


class TestIndexEntry:
    """Tests for IndexEntry."""

    def test_entry_layout(self):
        """Test the exact little-endian record layout."""
        entry = IndexEntry(key=b"ab", position=0x01020304, size=7)

        assert bytes(entry) == b"\x02\x00ab\x04\x03\x02\x01\x07\x00\x00\x00"
        assert entry.size_bytes() == 12
        assert entry.end == 0x01020304 + 7

    def test_entry_serialization(self):
        """Test entry serialization."""
        original = IndexEntry(key=b"\x00\xffbinary", position=42, size=DATA_SIZE_LIMIT)

        deserialized = IndexEntry.from_bytes(bytes(original))

        assert deserialized == original

    def test_key_too_long(self):
        entry = IndexEntry(key=b"x" * (KEY_SIZE_LIMIT + 1), position=0, size=0)

        with pytest.raises(KeySizeError):
            bytes(entry)

    def test_max_key_fits(self):
        entry = IndexEntry(key=b"x" * KEY_SIZE_LIMIT, position=0, size=0)

        assert bytes(entry)[:2] == b"\xff\xff"


class TestVersionHeader:
    """Tests for the version header codec."""

    def test_encode_version(self):
        assert encode_version(b"v1.0") == b"\x04\x00v1.0"

    def test_empty_version(self):
        assert encode_version(b"") == b"\x00\x00"

    def test_version_too_long(self):
        with pytest.raises(KeySizeError):
            encode_version(b"v" * (KEY_SIZE_LIMIT + 1))

    def test_to_key_bytes(self):
        assert to_key_bytes("héllo") == "héllo".encode("utf-8")
        assert to_key_bytes(bytearray(b"abc")) == b"abc"
        assert to_key_bytes(memoryview(b"abc")) == b"abc"

        with pytest.raises(TypeError):
            to_key_bytes(123)


class TestIndexFile:
    """Tests for IndexFile."""

    def test_new_file_has_no_version(self, temp_dir):
        index_file = IndexFile(os.path.join(temp_dir, "index"))
        with index_file:
            assert index_file.read_version() is None
            assert index_file.size() == 0

    def test_reset_and_replay(self, temp_dir):
        """Test writing a header plus records and reading them back."""
        path = os.path.join(temp_dir, "index")

        with IndexFile(path) as index_file:
            index_file.reset(b"v1")
            index_file.append(IndexEntry(key=b"a", position=0, size=2))
            index_file.append(IndexEntry(key=b"b", position=2, size=3))

        with IndexFile(path) as index_file:
            assert index_file.read_version() == b"v1"
            entries = list(index_file)

        assert entries == [
            IndexEntry(key=b"a", position=0, size=2),
            IndexEntry(key=b"b", position=2, size=3),
        ]

    def test_reset_discards_records(self, temp_dir):
        path = os.path.join(temp_dir, "index")

        with IndexFile(path) as index_file:
            index_file.reset(b"v1")
            index_file.append(IndexEntry(key=b"a", position=0, size=2))
            index_file.reset(b"v2")

            assert index_file.size() == 4
            assert list(index_file) == []

        with open(path, "rb") as f:
            assert f.read() == b"\x02\x00v2"

    def test_truncated_header(self, temp_dir):
        """A header claiming more bytes than present reads as missing."""
        path = os.path.join(temp_dir, "index")
        with open(path, "wb") as f:
            f.write(b"\x0a\x00v1")

        with IndexFile(path) as index_file:
            assert index_file.read_version() is None

    @pytest.mark.parametrize(
        "tail, reason",
        [
            (b"\x01", "short key length"),
            (b"\x05\x00ab", "short key"),
            (b"\x01\x00a\x00\x00", "short position/size"),
        ],
    )
    def test_truncated_record(self, temp_dir, tail, reason):
        """A partially written trailing record raises with its offset."""
        path = os.path.join(temp_dir, "index")
        with IndexFile(path) as index_file:
            index_file.reset(b"v1")
            index_file.append(IndexEntry(key=b"a", position=0, size=1))

        with open(path, "ab") as f:
            f.write(tail)

        with IndexFile(path) as index_file:
            index_file.read_version()
            iterator = iter(index_file)
            assert next(iterator).key == b"a"

            with pytest.raises(IndexCorruptionError) as exc_info:
                next(iterator)

        assert exc_info.value.entry_offset == 4 + 11
        assert exc_info.value.reason == reason

    def test_closed_file_raises(self, temp_dir):
        index_file = IndexFile(os.path.join(temp_dir, "index"))

        with pytest.raises(RuntimeError):
            index_file.append(IndexEntry(key=b"a", position=0, size=0))

        index_file.close()  # closing an unopened file is a no-op


class TestDataFile:
    """Tests for DataFile."""

    def test_append_and_read(self, temp_dir):
        data_file = DataFile(os.path.join(temp_dir, "data"))
        data_file.open()

        assert data_file.append(b"Aa") == 0
        assert data_file.append(b"Bbb") == 2
        assert data_file.read_at(2, 3) == b"Bbb"
        assert data_file.read_at(0, 2) == b"Aa"
        assert data_file.size() == 5

        data_file.close()

    def test_short_read(self, temp_dir):
        data_file = DataFile(os.path.join(temp_dir, "data"))
        data_file.open()
        data_file.append(b"abc")

        with pytest.raises(DataReadError) as exc_info:
            data_file.read_at(1, 10)

        assert exc_info.value.got == 2
        assert isinstance(exc_info.value, OSError)
        data_file.close()

    def test_truncate(self, temp_dir):
        data_file = DataFile(os.path.join(temp_dir, "data"))
        data_file.open()
        data_file.append(b"abc")
        data_file.truncate()

        assert data_file.size() == 0
        assert data_file.append(b"x") == 0
        data_file.close()

    def test_double_close(self, temp_dir):
        data_file = DataFile(os.path.join(temp_dir, "data"))
        data_file.open()
        data_file.close()
        data_file.close()

        with pytest.raises(RuntimeError):
            data_file.read_at(0, 0)


class TestStat:
    """Tests for Stat."""

    def test_total_bytes(self):
        stat = Stat(count=2, index_bytes=30, data_bytes=12)

        assert stat.total_bytes == 42
