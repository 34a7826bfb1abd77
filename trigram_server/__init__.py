"""Trigram index storage and candidate matching."""

from .index_backend import (
    IndexBackend,
    MemoryIndexBackend,
    JsonIndexBackend,
    SqliteIndexBackend,
    Visibility,
)
from .server import TrigramServer

__all__ = [
    "IndexBackend",
    "MemoryIndexBackend",
    "JsonIndexBackend",
    "SqliteIndexBackend",
    "Visibility",
    "TrigramServer",
]
