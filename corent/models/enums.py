"""Enumeration types for the rental ledger.

Values are the wire values stored by the backend.
"""

from enum import Enum


class PropertyStatus(str, Enum):
    ACTIVE = "actif"
    INACTIVE = "inactif"


class RoommateStatus(str, Enum):
    ACTIVE = "actif"
    INACTIVE = "inactif"


class TransactionType(str, Enum):
    REVENUE = "revenu"
    EXPENSE = "depense"


class TransactionStatus(str, Enum):
    COMPLETED = "complété"
    PENDING = "en attente"
    CANCELLED = "annulé"


class ObligationKind(str, Enum):
    RENT = "rent"
    MORTGAGE = "mortgage"


class AlertType(str, Enum):
    MISSING_PAYMENT = "missing_payment"
    LATE_MORTGAGE = "late_mortgage"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"


class AccountTier(str, Enum):
    FREE = "free"
    PLUS = "plus"
    PRO = "pro"


# Categories with a meaning for the ledger; any other string is allowed.
RENT_CATEGORY = "loyer"
CREDIT_CATEGORY = "credit"
