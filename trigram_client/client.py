"""
Fuzzy search client: turns records into trigram sets for the server,
and turns queries into ranked records with weights.
"""

import logging
from typing import Any, Hashable, Iterable, List, Optional, Sequence, Set, Union

from trigram.config import FuzzyConfig
from trigram.errors import ConfigurationError, FuzzySearchError, ReindexError, SearchError
from trigram.ngrams import extract_trigrams_from_values, query_trigrams
from trigram.scoring import ScoredResult
from trigram_server import TrigramServer, Visibility

from .records import RecordSource

logger = logging.getLogger(__name__)

Query = Union[str, Sequence[str], None]

# Default for search(visible=...): use the entity configuration's predicate
CONFIGURED: Any = object()


def _query_length(query: Query) -> int:
    if query is None:
        return 0
    if isinstance(query, str):
        return len(query)
    return len(" ".join(str(word) for word in query if word is not None))


class FuzzySearchClient:
    """Indexer and matcher for one entity type."""

    def __init__(
        self,
        config: FuzzyConfig,
        records: RecordSource,
        server: Optional[TrigramServer] = None,
        max_query_length: Optional[int] = None,
    ):
        self._config = config
        self._records = records
        self._server = server or TrigramServer()
        self._max_query_length = max_query_length

    @property
    def config(self) -> FuzzyConfig:
        return self._config

    @property
    def server(self) -> TrigramServer:
        return self._server

    @property
    def records(self) -> RecordSource:
        return self._records

    def trigrams_for(self, record: Any) -> Set[str]:
        """Trigram set of a record's searchable attributes, in configured order."""
        values = [self._records.get_attribute(record, name) for name in self._config.attributes]
        return extract_trigrams_from_values(values, self._config.normalizer)

    def reindex(self, record: Any) -> Set[str]:
        """
        Replace the stored trigrams of a record. Call after every save of its
        searchable attributes. Storage failures raise ReindexError; nothing is retried.
        """
        record_id = self._records.record_id(record)
        trigrams = self.trigrams_for(record)
        try:
            self._server.upload_trigrams(record_id, trigrams)
        except FuzzySearchError:
            raise
        except Exception as exc:
            logger.warning("Reindex of %s %r failed: %s", self._config.name, record_id, exc)
            raise ReindexError(record_id) from exc
        return trigrams

    def reindex_many(self, records: Iterable[Any]) -> int:
        count = 0
        for record in records:
            self.reindex(record)
            count += 1
        logger.info("Reindexed %d %s records", count, self._config.name)
        return count

    def delete(self, record_id: Hashable) -> None:
        """Drop the trigrams of a destroyed record."""
        try:
            self._server.delete_record(record_id)
        except FuzzySearchError:
            raise
        except Exception as exc:
            logger.warning("Deleting trigrams of %s %r failed: %s", self._config.name, record_id, exc)
            raise ReindexError(record_id, f"Deleting trigrams failed for record {record_id!r}") from exc

    def delete_record(self, record: Any) -> None:
        self.delete(self._records.record_id(record))

    def search(
        self,
        query: Query,
        threshold: Optional[float] = None,
        visible: Visibility = CONFIGURED,
        limit: Optional[int] = None,
    ) -> List[ScoredResult]:
        """
        Records similar to query, best first, each with its weight (0-100).
        Empty or None queries return []. threshold defaults to the entity
        configuration, and so does visible unless given; visible=None searches
        without any visibility filter. Queries over max_query_length raise
        SearchError.
        """
        if threshold is None:
            threshold = self._config.threshold
        elif not 0 <= threshold <= 100:
            raise ConfigurationError(f"Threshold must be within 0..100, got {threshold!r}")
        if visible is CONFIGURED:
            visible = self._config.visible

        if isinstance(query, str):
            query = query.strip()
        if self._max_query_length and _query_length(query) > self._max_query_length:
            raise SearchError(
                f"Query on {self._config.name} exceeds {self._max_query_length} characters"
            )
        tokens = query_trigrams(query, self._config.normalizer)
        if not tokens:
            return []

        try:
            matches = self._server.match(tokens, threshold, visible)
            loaded = self._records.load([record_id for record_id, _ in matches])
        except FuzzySearchError:
            raise
        except Exception as exc:
            logger.warning("Search on %s failed: %s", self._config.name, exc)
            raise SearchError(f"Search on {self._config.name} failed") from exc

        # Records removed between matching and loading are skipped
        results = [
            ScoredResult(record=loaded[record_id], weight=weight)
            for record_id, weight in matches
            if record_id in loaded
        ]
        if limit is not None:
            results = results[: max(limit, 0)]
        return results

    def fuzzy_find(self, query: Query) -> List[Any]:
        """Matching records without weights, best first."""
        return [result.record for result in self.search(query)]

    def close(self) -> None:
        self._server.close()
