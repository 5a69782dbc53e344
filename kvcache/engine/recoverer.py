"""
IndexRecoverer - Rebuild the in-memory index from the index file.
"""

from kvcache.models.index_entry import IndexEntry
from kvcache.models.index_file import IndexFile


class IndexRecoverer:
    """
    Recovers the key -> IndexEntry map by replaying the index file.

    Used when opening a cache whose version header matches.
    """

    def recover(self, index_file: IndexFile) -> dict[bytes, IndexEntry]:
        """
        Replay all records after the version header.

        Args:
            index_file: Open index file whose header has been read.

        Returns:
            Map of every recorded key to its entry.

        Raises:
            IndexCorruptionError: If the file ends inside a record.
        """
        index_map: dict[bytes, IndexEntry] = {}

        for entry in index_file:
            index_map[entry.key] = entry

        return index_map
