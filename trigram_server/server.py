"""
Trigram server: owns one entity type's trigram index and answers match
requests with weighted record ids. Knows nothing about record objects.
"""

import logging
from pathlib import Path
from typing import Hashable, Iterable, List, Optional, Set, Tuple

from trigram.scoring import DEFAULT_THRESHOLD, rank

from .index_backend import IndexBackend, JsonIndexBackend, MemoryIndexBackend, SqliteIndexBackend, Visibility

logger = logging.getLogger(__name__)


class TrigramServer:
    """Stores per-record trigram sets and scores query trigram sets against them."""

    def __init__(self, backend: Optional[IndexBackend] = None):
        self._backend: IndexBackend = backend if backend is not None else MemoryIndexBackend()

    @classmethod
    def from_storage(cls, storage_dir: Path, use_sqlite_index: bool = True) -> "TrigramServer":
        """File-backed server: SQLite (index.db) or JSON (index.json) in storage_dir."""
        storage_dir = Path(storage_dir)
        storage_dir.mkdir(parents=True, exist_ok=True)
        if use_sqlite_index:
            return cls(SqliteIndexBackend(storage_dir / "index.db"))
        return cls(JsonIndexBackend(storage_dir / "index.json"))

    @property
    def backend(self) -> IndexBackend:
        return self._backend

    def upload_trigrams(self, record_id: Hashable, trigrams: Set[str]) -> None:
        """Replace the stored trigram set of one record."""
        self._backend.replace_entries(record_id, trigrams)
        logger.debug("Stored %d trigrams for record %r", len(trigrams), record_id)

    def delete_record(self, record_id: Hashable) -> None:
        self._backend.delete_entries(record_id)
        logger.debug("Deleted trigrams of record %r", record_id)

    def match(
        self,
        query_trigrams: Iterable[str],
        threshold: float = DEFAULT_THRESHOLD,
        visible: Visibility = None,
    ) -> List[Tuple[Hashable, float]]:
        """
        (record_id, weight) pairs with weight >= threshold, best first.
        An empty trigram set matches nothing.
        """
        tokens = set(query_trigrams)
        if not tokens:
            return []
        candidates = self._backend.scored_candidates(tokens, visible)
        matches = rank(candidates, len(tokens), threshold)
        logger.debug(
            "Query of %d trigrams: %d candidates, %d above threshold %s",
            len(tokens), len(candidates), len(matches), threshold,
        )
        return matches

    def trigrams_of(self, record_id: Hashable) -> Set[str]:
        return self._backend.entries(record_id)

    def close(self) -> None:
        """Release resources (e.g. SQLite connection)."""
        self._backend.close()
