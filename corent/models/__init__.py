"""Domain models for the rental ledger."""

from corent.models.base import Event
from corent.models.enums import (
    CREDIT_CATEGORY,
    RENT_CATEGORY,
    AccountTier,
    AlertType,
    ObligationKind,
    PropertyStatus,
    RoommateStatus,
    Severity,
    TransactionStatus,
    TransactionType,
)
from corent.models.obligation import Alert, Obligation, PaymentStatus
from corent.models.period import Period
from corent.models.property import Property
from corent.models.roommate import Roommate
from corent.models.transaction import Transaction, TransactionDraft

__all__ = [
    "CREDIT_CATEGORY",
    "RENT_CATEGORY",
    "AccountTier",
    "Alert",
    "AlertType",
    "Event",
    "Obligation",
    "ObligationKind",
    "PaymentStatus",
    "Period",
    "Property",
    "PropertyStatus",
    "Roommate",
    "RoommateStatus",
    "Severity",
    "Transaction",
    "TransactionDraft",
    "TransactionStatus",
    "TransactionType",
]
