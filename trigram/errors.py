"""Exceptions raised by the fuzzy search client and configuration."""

from typing import Any, Optional


class FuzzySearchError(Exception):
    """Base class for fuzzy search failures."""


class ConfigurationError(FuzzySearchError, ValueError):
    """Invalid entity configuration or unknown entity type."""


class ReindexError(FuzzySearchError):
    """Storage failed while replacing or deleting a record's trigram entries."""

    def __init__(self, record_id: Any, message: Optional[str] = None) -> None:
        self.record_id = record_id
        super().__init__(message or f"Reindex failed for record {record_id!r}")


class SearchError(FuzzySearchError):
    """Storage failed while retrieving or scoring candidates."""
