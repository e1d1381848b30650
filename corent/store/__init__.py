"""Stores holding properties, roommates and transactions."""

from corent.store.base import Store, fetch_properties, fetch_roommates, fetch_transactions
from corent.store.memory import InMemoryStore
from corent.store.postgres import PostgresStore
from corent.store.records import PROPERTIES, ROOMMATES, TRANSACTIONS

__all__ = [
    "PROPERTIES",
    "ROOMMATES",
    "TRANSACTIONS",
    "InMemoryStore",
    "PostgresStore",
    "Store",
    "fetch_properties",
    "fetch_roommates",
    "fetch_transactions",
]
