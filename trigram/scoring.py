"""
Symmetric coverage scoring.

weight = ((m * 100 / Q) + (m * 100 / C)) / 2

m: trigrams shared by query and record, Q: query trigram count,
C: trigram count stored for the record. The mean of query-side and
record-side coverage; identical trigram sets score exactly 100.
"""

from dataclasses import dataclass
from typing import Any, Hashable, Iterable, List, Optional, Tuple

DEFAULT_THRESHOLD = 5.0


@dataclass(frozen=True)
class ScoredResult:
    """A matched record and its weight for one search call."""

    record: Any
    weight: float


def coverage_weight(match_count: int, query_size: int, entry_count: int) -> Optional[float]:
    """Weight on a 0-100 scale, or None when either side has no trigrams."""
    if query_size <= 0 or entry_count <= 0:
        return None
    query_coverage = match_count * 100.0 / query_size
    record_coverage = match_count * 100.0 / entry_count
    return (query_coverage + record_coverage) / 2.0


def rank(
    candidates: Iterable[Tuple[Hashable, int, int]],
    query_size: int,
    threshold: float = DEFAULT_THRESHOLD,
) -> List[Tuple[Hashable, float]]:
    """
    Score (record_id, match_count, entry_count) rows and keep those with
    weight >= threshold, highest weight first. Equal weights keep input order.
    """
    scored: List[Tuple[Hashable, float]] = []
    for record_id, match_count, entry_count in candidates:
        weight = coverage_weight(match_count, query_size, entry_count)
        if weight is None or weight < threshold:
            continue
        scored.append((record_id, weight))
    scored.sort(key=lambda item: -item[1])
    return scored
