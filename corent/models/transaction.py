"""Ledger transaction models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from corent.models.enums import TransactionStatus, TransactionType
from corent.models.period import Period


@dataclass
class Transaction:
    """Income or expense recorded against a property."""

    transaction_id: str
    property_id: str  # propriete_id
    transaction_type: TransactionType
    amount: Decimal  # montant
    date: date  # Only the month and year matter for obligations
    status: TransactionStatus
    category: str | None = None  # categorie
    roommate_id: str | None = None  # colocataire_id
    description: str | None = None
    is_automatic: bool = False  # est_automatique, set on generated entries

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def period(self) -> Period:
        return Period.of(self.date)

    @property
    def is_revenue(self) -> bool:
        return self.transaction_type == TransactionType.REVENUE

    @property
    def is_expense(self) -> bool:
        return self.transaction_type == TransactionType.EXPENSE


@dataclass
class TransactionDraft:
    """Transaction the system wants to create, not yet stored."""

    property_id: str
    transaction_type: TransactionType
    amount: Decimal
    date: date
    status: TransactionStatus
    category: str
    description: str
    is_automatic: bool = True
    roommate_id: str | None = None

    @property
    def period(self) -> Period:
        return Period.of(self.date)

    @property
    def dedup_key(self) -> tuple[str, str, str, bool]:
        """Key under which at most one draft may be stored."""
        return (self.property_id, str(self.period), self.category, self.is_automatic)
