"""
store/base.py -- The DataStore contract shared by UserModel and ContentModel.

Pattern: Port (structural typing). Models depend on this Protocol, never on a
concrete adapter, so tests can hand a model an in-memory SQLite store or a
MagicMock(spec=DataStore) that raises on demand.

Records are plain dicts of column name -> value. A query is an equality
mapping; an empty mapping matches every record in the collection.

Error contract for implementations:
  DuplicateError   -- the write violates a uniqueness rule the adapter enforces.
  PersistenceError -- any other driver or connection failure.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

Record = dict[str, Any]
Query = Mapping[str, Any]


@runtime_checkable
class DataStore(Protocol):
    def save(self, collection: str, record: Mapping[str, Any]) -> Any:
        """Persist a new record and return the identifier the store assigned."""
        ...

    def fetch(self, collection: str, query: Query, order_by: str | None = None) -> list[Record]:
        """Return every record matching query, ordered by order_by (default: insertion order)."""
        ...

    def update(self, collection: str, query: Query, patch: Mapping[str, Any]) -> int:
        """Apply patch to every record matching query. Returns the affected count."""
        ...
