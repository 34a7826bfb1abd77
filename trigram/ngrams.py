"""
Trigram tokenization for fuzzy search.

- Text is split into words on runs of whitespace and hyphens.
- Each word is normalized and padded with one space on each side, so word
  beginnings and endings get their own trigrams (" me", "er ").
- Results are sets: a trigram repeated across words counts once.
"""

import re
from typing import Iterable, List, Optional, Sequence, Set, Union

from .normalize import LowercaseNormalizer, Normalizer

TRIGRAM_SIZE = 3
_WORD_SEPARATORS = re.compile(r"[\s\-]+")

_DEFAULT_NORMALIZER = LowercaseNormalizer()


def split_words(text: str) -> List[str]:
    """Words of text; empty fragments (leading/trailing separators) are dropped."""
    return [w for w in _WORD_SEPARATORS.split(text) if w]


def word_trigrams(word: str, normalizer: Optional[Normalizer] = None) -> List[str]:
    """
    Trigrams of a single word, in window order (may contain duplicates).
    A word of normalized length L gives L trigrams; an empty one gives none.
    """
    normalized = (normalizer or _DEFAULT_NORMALIZER).normalize(word)
    if not normalized:
        return []
    padded = f" {normalized} "
    return [padded[i : i + TRIGRAM_SIZE] for i in range(len(padded) - TRIGRAM_SIZE + 1)]


def extract_trigrams(text: Optional[str], normalizer: Optional[Normalizer] = None) -> Set[str]:
    """Unique trigrams of all words in text. None or all-separator text gives an empty set."""
    if not text:
        return set()
    result: Set[str] = set()
    for word in split_words(text):
        result.update(word_trigrams(word, normalizer))
    return result


def extract_trigrams_from_values(
    values: Iterable[Optional[object]], normalizer: Optional[Normalizer] = None
) -> Set[str]:
    """Union of trigrams over attribute values. None values are skipped; others go through str()."""
    result: Set[str] = set()
    for value in values:
        if value is None:
            continue
        result.update(extract_trigrams(str(value), normalizer))
    return result


def query_trigrams(
    query: Union[str, Sequence[str], None], normalizer: Optional[Normalizer] = None
) -> Set[str]:
    """
    Trigram set of a search query. Accepts a string (split like indexed text)
    or an already split list of words.
    """
    if query is None:
        return set()
    if isinstance(query, str):
        return extract_trigrams(query.strip(), normalizer)
    return extract_trigrams_from_values(query, normalizer)
