"""Record source over a SQLAlchemy model: ids, attribute values, bulk loading."""
from typing import Any, Callable, Dict, Hashable, Optional, Sequence

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session


class OrmRecordSource:
    """Loads matched records of one mapped model by primary key."""

    def __init__(self, model: Any, session_factory: Callable[[], Session]):
        self._model = model
        self._session_factory = session_factory
        mapper = inspect(model)
        self._pk_name = mapper.get_property_by_column(mapper.primary_key[0]).key

    def record_id(self, record: Any) -> Hashable:
        return getattr(record, self._pk_name)

    def get_attribute(self, record: Any, name: str) -> Optional[Any]:
        return getattr(record, name, None)

    def load(self, record_ids: Sequence[Hashable]) -> Dict[Hashable, Any]:
        if not record_ids:
            return {}
        pk = getattr(self._model, self._pk_name)
        with self._session_factory() as session:
            rows = session.scalars(select(self._model).where(pk.in_(list(record_ids)))).all()
        return {getattr(row, self._pk_name): row for row in rows}
