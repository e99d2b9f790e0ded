"""In-memory normalized entity store.

Entities are partitioned by type (courses, sequences, units, ...) and keyed
by id inside each type. Writes always merge: fields present in the update
overwrite, fields absent from it are kept. Nothing in this layer deletes
records.

The store is an explicit object owned by the application entry point and
passed to orchestrators; there is no module-level instance.
"""

import copy
import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from .reporting import ErrorReporter, report_error

EntityRecord = dict[str, Any]


@dataclass(frozen=True)
class ModelEvent:
    """Emitted after every merge."""

    entity_type: str
    entity_id: str
    fields: tuple[str, ...]


ModelListener = Callable[[ModelEvent], None]


def _type_key(entity_type: str) -> str:
    if isinstance(entity_type, enum.Enum):
        return entity_type.value
    return entity_type


class ModelStore:
    """Type-partitioned mapping of entity id -> merged field record."""

    def __init__(self, log_error: ErrorReporter = report_error):
        self.log_error = log_error
        self._models: dict[str, dict[str, EntityRecord]] = {}
        self._listeners: list[ModelListener] = []

    def merge(
        self, entity_type: str, entity_id: str, fields: Mapping[str, Any]
    ) -> EntityRecord:
        """Create the record if absent, otherwise merge fields into it.

        Field-level merge: new values win on conflict, fields absent from the
        update are kept. Incoming values are deep-copied, so later changes to
        nested lists or dicts by the caller do not leak into the store. An
        ``id`` field is always present on the stored record.

        Returns the live stored record; use snapshot() for a detached copy.
        Listener exceptions are reported through log_error, never raised.
        """
        type_key = _type_key(entity_type)
        records = self._models.setdefault(type_key, {})
        record = records.setdefault(entity_id, {"id": entity_id})
        record.update(copy.deepcopy(dict(fields)))
        record["id"] = entity_id

        event = ModelEvent(type_key, entity_id, tuple(fields.keys()))
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self.log_error(e)
        return record

    def merge_many(
        self, entity_type: str, records: Iterable[Mapping[str, Any]]
    ) -> None:
        """Merge a list of records, each carrying its own ``id``."""
        for fields in records:
            self.merge(entity_type, fields["id"], fields)

    def merge_map(
        self, entity_type: str, records: Mapping[str, Mapping[str, Any]]
    ) -> None:
        """Merge an id -> record mapping."""
        for entity_id, fields in records.items():
            self.merge(entity_type, entity_id, fields)

    def get(self, entity_type: str, entity_id: str) -> EntityRecord | None:
        """Return the live record, or None when absent."""
        return self._models.get(_type_key(entity_type), {}).get(entity_id)

    def get_field(
        self, entity_type: str, entity_id: str, field: str, default: Any = None
    ) -> Any:
        record = self.get(entity_type, entity_id)
        if record is None:
            return default
        return record.get(field, default)

    def has(self, entity_type: str, entity_id: str) -> bool:
        return self.get(entity_type, entity_id) is not None

    def get_type(self, entity_type: str) -> Mapping[str, EntityRecord]:
        """Read-only view of all records of one type."""
        return MappingProxyType(self._models.get(_type_key(entity_type), {}))

    def snapshot(self) -> dict[str, dict[str, EntityRecord]]:
        """Deep copy of the whole store."""
        return copy.deepcopy(self._models)

    def subscribe(self, listener: ModelListener) -> Callable[[], None]:
        """Register a merge listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
