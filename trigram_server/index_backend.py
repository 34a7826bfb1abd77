"""
Trigram index storage backends: in-memory, JSON file and SQLite.
Each stores the deduplicated trigram set of every record and answers
"which records share trigrams with this query, and how many".
"""

import json
import logging
import os
import sqlite3
import tempfile
import threading
from collections import Counter
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Hashable, Iterable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

# Opaque to the index: called with a record id, False hides the record.
Visibility = Optional[Callable[[Hashable], bool]]


def _record_order(record_id: Hashable) -> Tuple[str, Hashable]:
    return (type(record_id).__name__, record_id)


class IndexBackend:
    """Abstract backend for (record_id, trigram) entries."""

    def replace_entries(self, record_id: Hashable, trigrams: Iterable[str]) -> None:
        """Atomically drop all entries of record_id and store the given set instead."""
        raise NotImplementedError

    def delete_entries(self, record_id: Hashable) -> None:
        """Remove every entry of a record."""
        raise NotImplementedError

    def count_entries(self, record_id: Hashable) -> int:
        """Number of distinct trigrams stored for a record."""
        raise NotImplementedError

    def entries(self, record_id: Hashable) -> Set[str]:
        """Stored trigram set of a record (empty if unknown)."""
        raise NotImplementedError

    def candidates_for(
        self, trigrams: Iterable[str], visible: Visibility = None
    ) -> List[Tuple[Hashable, int]]:
        """
        (record_id, match_count) for every visible record sharing at least one
        trigram with the given set, one row per record, ordered by record id.
        """
        raise NotImplementedError

    def scored_candidates(
        self, trigrams: Iterable[str], visible: Visibility = None
    ) -> List[Tuple[Hashable, int, int]]:
        """(record_id, match_count, entry_count) rows. Backends override to read one snapshot."""
        return [
            (record_id, match_count, self.count_entries(record_id))
            for record_id, match_count in self.candidates_for(trigrams, visible)
        ]

    def close(self) -> None:
        """Release resources."""
        pass


class MemoryIndexBackend(IndexBackend):
    """
    Record -> frozenset of trigrams plus an inverted trigram -> record ids map.
    New sets are built outside the lock and swapped in under it, so readers
    see either the old or the new set of a record, never a mix.
    """

    def __init__(self) -> None:
        self._entries: Dict[Hashable, FrozenSet[str]] = {}
        self._postings: Dict[str, Set[Hashable]] = {}
        self._lock = threading.RLock()

    def _unlink(self, record_id: Hashable) -> Optional[FrozenSet[str]]:
        old = self._entries.pop(record_id, None)
        if old:
            for token in old:
                ids = self._postings.get(token)
                if ids is None:
                    continue
                ids.discard(record_id)
                if not ids:
                    del self._postings[token]
        return old

    def _link(self, record_id: Hashable, tokens: FrozenSet[str]) -> None:
        if not tokens:
            return
        self._entries[record_id] = tokens
        for token in tokens:
            self._postings.setdefault(token, set()).add(record_id)

    def replace_entries(self, record_id: Hashable, trigrams: Iterable[str]) -> None:
        tokens = frozenset(trigrams)
        with self._lock:
            self._unlink(record_id)
            self._link(record_id, tokens)

    def delete_entries(self, record_id: Hashable) -> None:
        with self._lock:
            self._unlink(record_id)

    def count_entries(self, record_id: Hashable) -> int:
        with self._lock:
            return len(self._entries.get(record_id, ()))

    def entries(self, record_id: Hashable) -> Set[str]:
        with self._lock:
            return set(self._entries.get(record_id, ()))

    def _match_counts(self, trigrams: Iterable[str], visible: Visibility) -> List[Tuple[Hashable, int]]:
        counts: Counter = Counter()
        for token in set(trigrams):
            for record_id in self._postings.get(token, ()):
                counts[record_id] += 1
        rows = [(rid, n) for rid, n in counts.items() if visible is None or visible(rid)]
        rows.sort(key=lambda row: _record_order(row[0]))
        return rows

    def candidates_for(
        self, trigrams: Iterable[str], visible: Visibility = None
    ) -> List[Tuple[Hashable, int]]:
        with self._lock:
            return self._match_counts(trigrams, visible)

    def scored_candidates(
        self, trigrams: Iterable[str], visible: Visibility = None
    ) -> List[Tuple[Hashable, int, int]]:
        with self._lock:
            return [
                (rid, n, len(self._entries.get(rid, ())))
                for rid, n in self._match_counts(trigrams, visible)
            ]


class JsonIndexBackend(MemoryIndexBackend):
    """In-memory index persisted as JSON after every write. Suited to small record sets."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self._path = Path(path)
        if self._path.exists():
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
            # List of {"record_id", "tokens"} rows: JSON object keys would turn int ids into str
            for row in data:
                self._link(row["record_id"], frozenset(row["tokens"]))
            logger.debug("Loaded trigram entries of %d records from %s", len(self._entries), self._path)

    def _save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        rows = [
            {"record_id": rid, "tokens": sorted(self._entries[rid])}
            for rid in sorted(self._entries, key=_record_order)
        ]
        fd, tmp = tempfile.mkstemp(dir=str(self._path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(rows, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self._path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def _apply(self, record_id: Hashable, tokens: FrozenSet[str]) -> None:
        with self._lock:
            previous = self._unlink(record_id)
            self._link(record_id, tokens)
            try:
                self._save()
            except (OSError, TypeError, ValueError):
                logger.warning("Could not persist trigram index to %s; restoring record %r", self._path, record_id)
                # Keep memory and file in agreement
                self._unlink(record_id)
                if previous:
                    self._link(record_id, previous)
                raise

    def replace_entries(self, record_id: Hashable, trigrams: Iterable[str]) -> None:
        self._apply(record_id, frozenset(trigrams))

    def delete_entries(self, record_id: Hashable) -> None:
        self._apply(record_id, frozenset())


class SqliteIndexBackend(IndexBackend):
    """
    SQLite-backed index: one row per (record_id, token).
    Replacement runs DELETE + INSERT in one transaction; a failure rolls back.
    """

    def __init__(self, path: Path, table: str = "trigram_entries") -> None:
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table!r}")
        self._path = Path(path)
        self._table = table
        if str(path) != ":memory:":
            self._path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.RLock()
        with self._lock, self._conn:
            self._conn.execute(
                f"CREATE TABLE IF NOT EXISTS {table} "
                "(record_id NOT NULL, token TEXT NOT NULL, UNIQUE(record_id, token))"
            )
            self._conn.execute(f"CREATE INDEX IF NOT EXISTS idx_{table}_token ON {table}(token)")

    def replace_entries(self, record_id: Hashable, trigrams: Iterable[str]) -> None:
        rows = [(record_id, token) for token in sorted(set(trigrams))]
        with self._lock, self._conn:
            self._conn.execute(f"DELETE FROM {self._table} WHERE record_id = ?", (record_id,))
            self._conn.executemany(
                f"INSERT INTO {self._table} (record_id, token) VALUES (?, ?)", rows
            )

    def delete_entries(self, record_id: Hashable) -> None:
        with self._lock, self._conn:
            self._conn.execute(f"DELETE FROM {self._table} WHERE record_id = ?", (record_id,))

    def count_entries(self, record_id: Hashable) -> int:
        with self._lock:
            row = self._conn.execute(
                f"SELECT COUNT(*) FROM {self._table} WHERE record_id = ?", (record_id,)
            ).fetchone()
        return int(row[0])

    def entries(self, record_id: Hashable) -> Set[str]:
        with self._lock:
            cur = self._conn.execute(
                f"SELECT token FROM {self._table} WHERE record_id = ?", (record_id,)
            )
            return {row[0] for row in cur.fetchall()}

    def candidates_for(
        self, trigrams: Iterable[str], visible: Visibility = None
    ) -> List[Tuple[Hashable, int]]:
        return [(rid, matched) for rid, matched, _ in self.scored_candidates(trigrams, visible)]

    def scored_candidates(
        self, trigrams: Iterable[str], visible: Visibility = None
    ) -> List[Tuple[Hashable, int, int]]:
        tokens = sorted(set(trigrams))
        if not tokens:
            return []
        placeholders = ", ".join("?" for _ in tokens)
        sql = (
            f"SELECT e.record_id, COUNT(*) AS matched, "
            f"(SELECT COUNT(*) FROM {self._table} t WHERE t.record_id = e.record_id) AS total "
            f"FROM {self._table} e WHERE e.token IN ({placeholders}) "
            f"GROUP BY e.record_id ORDER BY e.record_id"
        )
        with self._lock:
            rows = self._conn.execute(sql, tokens).fetchall()
        return [
            (rid, int(matched), int(total))
            for rid, matched, total in rows
            if visible is None or visible(rid)
        ]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
