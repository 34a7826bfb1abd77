"""
Index service: SQLAlchemy-backed trigram index over a per-entity trigram model.
Replacement is one transaction (DELETE + INSERT); candidates and their entry
counts come from a single grouped query with a correlated count subquery.
"""

import logging
from typing import Any, Callable, Hashable, Iterable, List, Optional, Set, Tuple

from sqlalchemy import delete, func, insert, inspect, select
from sqlalchemy.orm import Session, aliased
from sqlalchemy.sql.expression import ClauseElement

from trigram_server.index_backend import IndexBackend

logger = logging.getLogger(__name__)


class SqlAlchemyIndexBackend(IndexBackend):
    """
    Stores trigrams in trigram_model (a TrigramEntryMixin subclass with a
    record_id column). With entity_model given, the visibility predicate may
    be a SQL criterion on the entity (e.g. User.not_deleted()) and is applied
    in the candidate query; a plain callable is applied to record ids.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        trigram_model: Any,
        entity_model: Optional[Any] = None,
    ):
        self._session_factory = session_factory
        self._model = trigram_model
        self._entity = entity_model
        self._entity_pk = None
        if entity_model is not None:
            mapper = inspect(entity_model)
            key = mapper.get_property_by_column(mapper.primary_key[0]).key
            self._entity_pk = getattr(entity_model, key)

    def _lock_record(self, session: Session, record_id: Hashable) -> None:
        # Serializes writers of the same record where the dialect supports FOR UPDATE
        if self._entity_pk is not None:
            session.execute(
                select(self._entity_pk).where(self._entity_pk == record_id).with_for_update()
            )

    def replace_entries(self, record_id: Hashable, trigrams: Iterable[str]) -> None:
        rows = [{"record_id": record_id, "token": token} for token in sorted(set(trigrams))]
        with self._session_factory() as session, session.begin():
            self._lock_record(session, record_id)
            session.execute(delete(self._model).where(self._model.record_id == record_id))
            if rows:
                session.execute(insert(self._model), rows)
        logger.debug("Replaced %s entries of record %r with %d rows", self._model.__tablename__, record_id, len(rows))

    def delete_entries(self, record_id: Hashable) -> None:
        with self._session_factory() as session, session.begin():
            session.execute(delete(self._model).where(self._model.record_id == record_id))

    def count_entries(self, record_id: Hashable) -> int:
        stmt = select(func.count()).select_from(self._model).where(self._model.record_id == record_id)
        with self._session_factory() as session:
            return int(session.scalar(stmt) or 0)

    def entries(self, record_id: Hashable) -> Set[str]:
        stmt = select(self._model.token).where(self._model.record_id == record_id)
        with self._session_factory() as session:
            return set(session.scalars(stmt).all())

    def candidates_for(
        self, trigrams: Iterable[str], visible: Any = None
    ) -> List[Tuple[Hashable, int]]:
        return [(rid, matched) for rid, matched, _ in self.scored_candidates(trigrams, visible)]

    def scored_candidates(
        self, trigrams: Iterable[str], visible: Any = None
    ) -> List[Tuple[Hashable, int, int]]:
        tokens = sorted(set(trigrams))
        if not tokens:
            return []
        model = self._model
        inner = aliased(model)
        total = (
            select(func.count())
            .select_from(inner)
            .where(inner.record_id == model.record_id)
            .correlate(model)
            .scalar_subquery()
        )
        stmt = (
            select(model.record_id, func.count().label("matched"), total.label("total"))
            .where(model.token.in_(tokens))
            .group_by(model.record_id)
            .order_by(model.record_id)
        )
        row_filter = None
        if isinstance(visible, ClauseElement):
            if self._entity is None:
                raise ValueError("A SQL visibility criterion needs entity_model")
            stmt = stmt.join(self._entity, self._entity_pk == model.record_id).where(visible)
        elif visible is not None:
            row_filter = visible
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        return [
            (rid, int(matched), int(total))
            for rid, matched, total in rows
            if row_filter is None or row_filter(rid)
        ]
