"""An in-memory record store keyed by record type and identifier."""

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Any, TypeVar

T = TypeVar("T")

_MISSING = object()


def _as_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class Store:
    """Holds records of any dataclass type that has an ``id`` field."""

    def __init__(self, online: bool = True) -> None:
        self.online = online
        self._tables: dict[type, dict[uuid.UUID, Any]] = defaultdict(dict)

    def add(self, record: T) -> T:
        """Insert or replace a record."""
        self._tables[type(record)][record.id] = record
        return record

    def get(self, kind: type[T], record_id: Any) -> T | None:
        """Return the record of the kind with the identifier, or None."""
        key = _as_uuid(record_id)
        if key is None:
            return None
        return self._tables.get(kind, {}).get(key)

    def all(self, kind: type[T]) -> list[T]:
        """All records of a kind in insertion order."""
        return list(self._tables.get(kind, {}).values())

    def find(self, kind: type[T], **kwargs: Any) -> list[T]:
        """Records whose attributes equal every given keyword value."""
        return [
            record
            for record in self.all(kind)
            if all(getattr(record, name, _MISSING) == value for name, value in kwargs.items())
        ]

    def first(self, kind: type[T], **kwargs: Any) -> T | None:
        """The first record matching the filters, or None."""
        return next(iter(self.find(kind, **kwargs)), None)

    def delete(self, record: Any) -> bool:
        """Remove a record; True when it was present."""
        table = self._tables.get(type(record))
        if table is None:
            return False
        return table.pop(record.id, None) is not None

    def ping(self) -> bool:
        """True when the store answers."""
        return self.online