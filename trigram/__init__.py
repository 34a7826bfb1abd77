"""Trigram extraction, normalization and scoring for fuzzy record search."""

from .normalize import (
    Normalizer,
    LowercaseNormalizer,
    LatinFoldNormalizer,
    UnicodeFoldNormalizer,
    FunctionNormalizer,
    as_normalizer,
)
from .ngrams import (
    split_words,
    word_trigrams,
    extract_trigrams,
    extract_trigrams_from_values,
    query_trigrams,
)
from .scoring import DEFAULT_THRESHOLD, ScoredResult, coverage_weight, rank
from .config import FuzzyConfig, fuzzy_search_attributes
from .errors import FuzzySearchError, ConfigurationError, ReindexError, SearchError

__all__ = [
    "Normalizer",
    "LowercaseNormalizer",
    "LatinFoldNormalizer",
    "UnicodeFoldNormalizer",
    "FunctionNormalizer",
    "as_normalizer",
    "split_words",
    "word_trigrams",
    "extract_trigrams",
    "extract_trigrams_from_values",
    "query_trigrams",
    "DEFAULT_THRESHOLD",
    "ScoredResult",
    "coverage_weight",
    "rank",
    "FuzzyConfig",
    "fuzzy_search_attributes",
    "FuzzySearchError",
    "ConfigurationError",
    "ReindexError",
    "SearchError",
]
