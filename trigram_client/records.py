"""
Record access for the fuzzy search client.

The client never owns records: it asks a RecordSource for a record's id,
for its searchable attribute values, and to load matched records by id.
"""

from typing import Any, Dict, Hashable, Iterable, Mapping, Optional, Protocol, Sequence


class RecordSource(Protocol):
    def record_id(self, record: Any) -> Hashable:
        ...

    def get_attribute(self, record: Any, name: str) -> Optional[Any]:
        ...

    def load(self, record_ids: Sequence[Hashable]) -> Dict[Hashable, Any]:
        ...


class MappingRecordSource:
    """
    Records held in memory, keyed by id. Records may be plain objects
    (attributes via getattr) or mappings (attributes via key lookup).
    """

    def __init__(self, records: Iterable[Any] = (), id_attribute: str = "id") -> None:
        self._id_attribute = id_attribute
        self._records: Dict[Hashable, Any] = {}
        for record in records:
            self.add(record)

    def record_id(self, record: Any) -> Hashable:
        return self.get_attribute(record, self._id_attribute)

    def get_attribute(self, record: Any, name: str) -> Optional[Any]:
        if isinstance(record, Mapping):
            return record.get(name)
        return getattr(record, name, None)

    def add(self, record: Any) -> Hashable:
        record_id = self.record_id(record)
        if record_id is None:
            raise ValueError(f"Record has no {self._id_attribute!r}: {record!r}")
        self._records[record_id] = record
        return record_id

    def remove(self, record_id: Hashable) -> Optional[Any]:
        return self._records.pop(record_id, None)

    def get(self, record_id: Hashable) -> Optional[Any]:
        return self._records.get(record_id)

    def load(self, record_ids: Sequence[Hashable]) -> Dict[Hashable, Any]:
        return {rid: self._records[rid] for rid in record_ids if rid in self._records}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records.values()))
