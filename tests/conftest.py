"""Pytest configuration and fixtures."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Callable

import pytest

from corent.models import (
    CREDIT_CATEGORY,
    RENT_CATEGORY,
    Property,
    PropertyStatus,
    Roommate,
    RoommateStatus,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from corent.store import InMemoryStore


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def as_of() -> date:
    """Reference date: after the 5th, so day-5 billing is due."""
    return date(2024, 6, 10)


@pytest.fixture
def sample_user_id() -> str:
    return "user-test-001"


@pytest.fixture
def make_property(sample_user_id: str) -> Callable[..., Property]:
    """Factory for properties with a complete mortgage by default."""

    def factory(**overrides: Any) -> Property:
        values: dict[str, Any] = {
            "property_id": "prop-001",
            "user_id": sample_user_id,
            "name": "Coloc Lyon",
            "status": PropertyStatus.ACTIVE,
            "monthly_credit": Decimal("800"),
            "credit_debit_day": 5,
            "credit_start_date": date(2024, 1, 1),
        }
        values.update(overrides)
        return Property(**values)

    return factory


@pytest.fixture
def make_roommate() -> Callable[..., Roommate]:
    def factory(**overrides: Any) -> Roommate:
        values: dict[str, Any] = {
            "roommate_id": "room-001",
            "property_id": "prop-001",
            "status": RoommateStatus.ACTIVE,
            "rent_amount": Decimal("500"),
            "first_name": "Camille",
            "last_name": "Martin",
        }
        values.update(overrides)
        return Roommate(**values)

    return factory


@pytest.fixture
def make_rent_payment() -> Callable[..., Transaction]:
    """Factory for completed rent payments from room-001."""

    def factory(**overrides: Any) -> Transaction:
        values: dict[str, Any] = {
            "transaction_id": "tx-rent-001",
            "property_id": "prop-001",
            "roommate_id": "room-001",
            "transaction_type": TransactionType.REVENUE,
            "amount": Decimal("500"),
            "date": date(2024, 6, 2),
            "status": TransactionStatus.COMPLETED,
            "category": RENT_CATEGORY,
        }
        values.update(overrides)
        return Transaction(**values)

    return factory


@pytest.fixture
def make_mortgage_payment() -> Callable[..., Transaction]:
    """Factory for automatic mortgage payments of prop-001."""

    def factory(**overrides: Any) -> Transaction:
        values: dict[str, Any] = {
            "transaction_id": "tx-credit-001",
            "property_id": "prop-001",
            "transaction_type": TransactionType.EXPENSE,
            "amount": Decimal("800"),
            "date": date(2024, 6, 5),
            "status": TransactionStatus.COMPLETED,
            "category": CREDIT_CATEGORY,
            "is_automatic": True,
        }
        values.update(overrides)
        return Transaction(**values)

    return factory


@pytest.fixture
def property_row(sample_user_id: str) -> dict[str, Any]:
    """Stored row of the reference mortgage property."""
    return {
        "id": "prop-001",
        "user_id": sample_user_id,
        "nom": "Coloc Lyon",
        "statut": "actif",
        "credit_mensuel": "800",
        "jour_prelevement_credit": 5,
        "date_debut_credit": "2024-01-01",
        "date_fin_credit": None,
    }


@pytest.fixture
def store(property_row: dict[str, Any]) -> InMemoryStore:
    """In-memory store holding the reference property."""
    store = InMemoryStore()
    store.add_property(property_row)
    return store


@pytest.fixture
def restore_logging():
    """Put the root logger back as it was after setup_logging ran."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    corent_level = logging.getLogger("corent").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("corent").setLevel(corent_level)
