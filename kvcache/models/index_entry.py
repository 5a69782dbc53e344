"""
IndexEntry dataclass and the binary layout of the index file.

Index file format (all integers little-endian):

    [version_len:2][version]
    repeated: [key_len:2][key][position:4][size:4]
"""

from dataclasses import dataclass

from kvcache.models.exceptions import KeySizeError

# Max length of an individual key and of the version tag (64 KB)
KEY_SIZE_LIMIT = (1 << 16) - 1

# Max total size of the data file (4 GB)
DATA_SIZE_LIMIT = (1 << 32) - 1

KEY_LEN_SIZE = 2
POSITION_SIZE = 4
SIZE_SIZE = 4


def to_key_bytes(key: str | bytes | bytearray | memoryview) -> bytes:
    """Normalize a key (or version tag) to bytes; str is UTF-8 encoded."""
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"key must be str or bytes-like, got {type(key).__name__}")


def check_key_size(key: bytes) -> None:
    if len(key) > KEY_SIZE_LIMIT:
        raise KeySizeError(len(key), KEY_SIZE_LIMIT)


def encode_version(version: bytes) -> bytes:
    """
    Serialize the version header.

    Format: [version_len:2][version]
    """
    check_key_size(version)
    return len(version).to_bytes(KEY_LEN_SIZE, "little") + version


@dataclass(frozen=True)
class IndexEntry:
    """
    Location of a single value in the data file.

    Attributes:
        key: The key the value is stored under.
        position: Byte offset of the value in the data file.
        size: Byte length of the value.
    """

    key: bytes
    position: int
    size: int

    def __bytes__(self) -> bytes:
        """
        Serialize the entry to bytes for the index file.

        Format: [key_len:2][key][position:4][size:4]
        """
        check_key_size(self.key)
        return (
            len(self.key).to_bytes(KEY_LEN_SIZE, "little")
            + self.key
            + self.position.to_bytes(POSITION_SIZE, "little")
            + self.size.to_bytes(SIZE_SIZE, "little")
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "IndexEntry":
        """Deserialize one complete record."""
        offset = 0

        key_len = int.from_bytes(data[offset : offset + KEY_LEN_SIZE], "little")
        offset += KEY_LEN_SIZE

        key = bytes(data[offset : offset + key_len])
        offset += key_len

        position = int.from_bytes(data[offset : offset + POSITION_SIZE], "little")
        offset += POSITION_SIZE

        size = int.from_bytes(data[offset : offset + SIZE_SIZE], "little")

        return cls(key=key, position=position, size=size)

    def size_bytes(self) -> int:
        """Return the size of this record in the index file."""
        return KEY_LEN_SIZE + len(self.key) + POSITION_SIZE + SIZE_SIZE

    @property
    def end(self) -> int:
        """Offset just past the value in the data file."""
        return self.position + self.size
