"""In-memory store with referential integrity and uniqueness constraints."""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable

from corent.exceptions import ReferentialIntegrityError, StoreError
from corent.store.base import split_filter
from corent.store.records import (
    PROPERTIES,
    ROOMMATES,
    TRANSACTIONS,
    automatic_transaction_key,
)

UniqueKey = Callable[[dict[str, Any]], tuple | None]


def _comparable(row_value: Any, filter_value: Any) -> Any:
    """Bring a stored value to the type of the filter value."""
    if isinstance(filter_value, date) and isinstance(row_value, str):
        return date.fromisoformat(row_value[:10])
    if isinstance(filter_value, date) and isinstance(row_value, datetime):
        return row_value.date()
    return row_value


def _matches(row: dict[str, Any], filters: dict[str, Any]) -> bool:
    for name, expected in filters.items():
        column, op = split_filter(name)
        if op == "in":
            if row.get(column) not in expected:
                return False
            continue

        actual = row.get(column)
        if op == "eq":
            if _comparable(actual, expected) != expected:
                return False
            continue

        if actual is None:
            return False
        actual = _comparable(actual, expected)
        if op == "gte" and not actual >= expected:
            return False
        if op == "gt" and not actual > expected:
            return False
        if op == "lte" and not actual <= expected:
            return False
        if op == "lt" and not actual < expected:
            return False
    return True


@dataclass
class InMemoryStore:
    """In-memory store for rows keyed by collection.

    Mirrors the constraints of the real backend: roommates and transactions
    must reference an existing property, and a row whose unique key is
    already taken is rejected. Checks and writes happen under one lock, so
    ``insert_if_absent`` is atomic across threads.
    """

    rows: dict[str, dict[str, dict[str, Any]]] = field(
        default_factory=lambda: {PROPERTIES: {}, ROOMMATES: {}, TRANSACTIONS: {}}
    )
    unique_keys: dict[str, UniqueKey] = field(
        default_factory=lambda: {TRANSACTIONS: automatic_transaction_key}
    )

    # Unique keys in use, per collection
    _taken_keys: dict[str, set[tuple]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def query(self, collection: str, **filters: Any) -> list[dict[str, Any]]:
        """Rows of ``collection`` matching every filter (copies)."""
        with self._lock:
            table = self._table(collection)
            return [dict(row) for row in table.values() if _matches(row, filters)]

    def insert(self, collection: str, record: dict[str, Any]) -> str:
        """Insert a row and return its ID.

        Raises
        ------
        StoreError
            If the row violates a uniqueness constraint.
        ReferentialIntegrityError
            If the row references a missing property.
        """
        with self._lock:
            row_id = self._insert(collection, record)
        if row_id is None:
            raise StoreError(f"Duplicate key in {collection}")
        return row_id

    def insert_if_absent(self, collection: str, record: dict[str, Any]) -> str | None:
        """Insert a row unless its unique key is taken; ``None`` on conflict."""
        with self._lock:
            return self._insert(collection, record)

    def add_property(self, record: dict[str, Any]) -> str:
        return self.insert(PROPERTIES, record)

    def add_roommate(self, record: dict[str, Any]) -> str:
        return self.insert(ROOMMATES, record)

    def add_transaction(self, record: dict[str, Any]) -> str:
        return self.insert(TRANSACTIONS, record)

    def summary(self) -> dict[str, int]:
        """Return row counts per collection."""
        return {name: len(table) for name, table in self.rows.items()}

    def _table(self, collection: str) -> dict[str, dict[str, Any]]:
        if collection not in self.rows:
            raise StoreError(f"Unknown collection: {collection}")
        return self.rows[collection]

    def _insert(self, collection: str, record: dict[str, Any]) -> str | None:
        table = self._table(collection)

        if collection in (ROOMMATES, TRANSACTIONS):
            property_id = record.get("propriete_id")
            if property_id not in self.rows[PROPERTIES]:
                raise ReferentialIntegrityError(f"Property {property_id} not found")

        key_fn = self.unique_keys.get(collection)
        key = key_fn(record) if key_fn else None
        taken = self._taken_keys.setdefault(collection, set())
        if key is not None and key in taken:
            return None

        row = dict(record)
        row_id = str(row.get("id") or uuid.uuid4())
        if row_id in table:
            return None
        row["id"] = row_id
        if row.get("created_at") is None:
            row["created_at"] = datetime.now()
        table[row_id] = row
        if key is not None:
            taken.add(key)
        return row_id
