"""Store interface and typed read helpers."""

from datetime import date
from typing import Any, Protocol

from corent.models import Property, Roommate, Transaction
from corent.store.records import (
    PROPERTIES,
    ROOMMATES,
    TRANSACTIONS,
    parse_property,
    parse_roommate,
    parse_transaction,
)

# Filter suffixes understood by every store: ``date__gte=...``
OPERATORS = ("eq", "gte", "gt", "lte", "lt", "in")


class Store(Protocol):
    """Persistence collaborator holding properties, roommates and transactions.

    ``query`` filters are keyword arguments named after columns, optionally
    suffixed with an operator (``date__gte``, ``id__in``). ``insert`` raises
    ``StoreError`` when a uniqueness constraint is violated;
    ``insert_if_absent`` returns ``None`` instead.
    """

    def query(self, collection: str, **filters: Any) -> list[dict[str, Any]]: ...

    def insert(self, collection: str, record: dict[str, Any]) -> str: ...

    def insert_if_absent(self, collection: str, record: dict[str, Any]) -> str | None: ...


def split_filter(name: str) -> tuple[str, str]:
    """Split ``date__gte`` into ``("date", "gte")``."""
    column, _, op = name.partition("__")
    op = op or "eq"
    if op not in OPERATORS:
        raise ValueError(f"Unknown filter operator: {op}")
    return column, op


def fetch_properties(store: Store, user_id: str, active_only: bool = False) -> list[Property]:
    """Properties owned by ``user_id``."""
    filters: dict[str, Any] = {"user_id": user_id}
    if active_only:
        filters["statut"] = "actif"
    return [parse_property(row) for row in store.query(PROPERTIES, **filters)]


def fetch_roommates(store: Store, property_ids: list[str]) -> list[Roommate]:
    """Roommates of the given properties."""
    if not property_ids:
        return []
    return [parse_roommate(row) for row in store.query(ROOMMATES, propriete_id__in=property_ids)]


def fetch_transactions(
    store: Store,
    property_ids: list[str],
    start: date | None = None,
    end: date | None = None,
    **filters: Any,
) -> list[Transaction]:
    """Transactions of the given properties, optionally within ``[start, end]``."""
    if not property_ids:
        return []
    if start is not None:
        filters["date__gte"] = start
    if end is not None:
        filters["date__lte"] = end
    rows = store.query(TRANSACTIONS, propriete_id__in=property_ids, **filters)
    return [parse_transaction(row) for row in rows]
