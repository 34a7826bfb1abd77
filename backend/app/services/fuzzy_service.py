"""Wires a mapped SQLAlchemy model into a FuzzyRegistry."""
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from trigram.config import fuzzy_search_attributes
from trigram_client import FuzzyRegistry, FuzzySearchClient
from trigram_server import TrigramServer

from ..config import DEFAULT_THRESHOLD, MAX_QUERY_LENGTH
from ..database import SessionLocal
from .index_service import SqlAlchemyIndexBackend
from .record_source import OrmRecordSource


def register_model(
    registry: FuzzyRegistry,
    model: Any,
    trigram_model: Any,
    *attributes: str,
    normalizer: Any = None,
    threshold: float = DEFAULT_THRESHOLD,
    visible: Optional[Any] = None,
    session_factory: Callable[[], Session] = SessionLocal,
) -> FuzzySearchClient:
    """
    Make model fuzzy-searchable on the given attributes, storing trigrams in
    trigram_model. visible defaults to model.not_deleted() for soft-deletable models.
    """
    if visible is None and hasattr(model, "not_deleted"):
        visible = model.not_deleted()
    config = fuzzy_search_attributes(
        model.__name__,
        *attributes,
        normalizer=normalizer,
        threshold=threshold,
        visible=visible,
    )
    backend = SqlAlchemyIndexBackend(session_factory, trigram_model, entity_model=model)
    return registry.register(
        model,
        config,
        OrmRecordSource(model, session_factory),
        server=TrigramServer(backend),
        max_query_length=MAX_QUERY_LENGTH,
    )
