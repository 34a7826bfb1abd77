"""
Word normalization for trigram indexing.

- The same normalizer must be used when indexing a record and when tokenizing
  a query for that entity type, otherwise trigrams never line up.
- Normalizers work on code points (str), never on encoded bytes.
"""

import unicodedata
from typing import Callable, Protocol, Tuple, runtime_checkable


@runtime_checkable
class Normalizer(Protocol):
    """Canonicalizes a word so that lexical variants compare equal."""

    def normalize(self, text: str) -> str:
        ...


class LowercaseNormalizer:
    """Default normalizer: case folding only."""

    def normalize(self, text: str) -> str:
        return text.lower()

    def __repr__(self) -> str:
        return "LowercaseNormalizer()"


# Applied in order, after lowercasing and before single-letter folding.
_DIGRAPHS: Tuple[Tuple[str, str], ...] = (
    ("ue", "u"),
    ("ae", "a"),
    ("oe", "o"),
    ("ss", "s"),
    ("ß", "s"),
)

# Latin-1 accented letters -> base letter (both cases, ÿ has no upper form in Latin-1)
_LATIN1_FOLD = str.maketrans(
    "ÀÁÂÃÄÅÇÈÉÊËÌÍÎÏÑÒÓÔÕÖØÙÚÛÜÝàáâãäåçèéêëìíîïñòóôõöøùúûüýÿ",
    "aaaaaaceeeeiiiinoooooouuuuyaaaaaaceeeeiiiinoooooouuuuyy",
)


class LatinFoldNormalizer:
    """
    Lowercase, fold German digraphs (ue, ae, oe, ss, ß) and strip Latin-1 diacritics.
    "Müller", "Mueller" and "Muller" all normalize to "muller".
    """

    def normalize(self, text: str) -> str:
        text = text.lower()
        for digraph, replacement in _DIGRAPHS:
            text = text.replace(digraph, replacement)
        return text.translate(_LATIN1_FOLD)

    def __repr__(self) -> str:
        return "LatinFoldNormalizer()"


class UnicodeFoldNormalizer:
    """Lowercase and drop combining marks after NFD decomposition (é->e, č->c, ř->r)."""

    def normalize(self, text: str) -> str:
        decomposed = unicodedata.normalize("NFD", text.lower())
        return "".join(c for c in decomposed if unicodedata.category(c) != "Mn")

    def __repr__(self) -> str:
        return "UnicodeFoldNormalizer()"


class FunctionNormalizer:
    """Adapts a plain str -> str callable to the Normalizer interface."""

    def __init__(self, func: Callable[[str], str]) -> None:
        self._func = func

    def normalize(self, text: str) -> str:
        return self._func(text)

    def __repr__(self) -> str:
        return f"FunctionNormalizer({getattr(self._func, '__name__', self._func)!r})"


def as_normalizer(value) -> Normalizer:
    """Accept a Normalizer, a callable, or None (default lowercase)."""
    if value is None:
        return LowercaseNormalizer()
    if isinstance(value, Normalizer):
        return value
    if callable(value):
        return FunctionNormalizer(value)
    raise TypeError(f"Not a normalizer: {value!r}")
