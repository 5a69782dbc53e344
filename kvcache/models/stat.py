from dataclasses import dataclass


@dataclass(frozen=True)
class Stat:
    """
    Point-in-time summary of a cache.

    Attributes:
        count: Number of entries in the cache.
        index_bytes: Size of the index file, version header included.
        data_bytes: Size of the data file.
        total_bytes: index_bytes + data_bytes.
    """

    count: int
    index_bytes: int
    data_bytes: int

    @property
    def total_bytes(self) -> int:
        return self.index_bytes + self.data_bytes
