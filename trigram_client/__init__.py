"""Record-facing fuzzy search: reindex records, search them by trigram similarity."""

from .client import CONFIGURED, FuzzySearchClient
from .records import MappingRecordSource, RecordSource
from .registry import FuzzyRegistry

__all__ = ["CONFIGURED", "FuzzySearchClient", "MappingRecordSource", "RecordSource", "FuzzyRegistry"]
