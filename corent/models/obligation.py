"""Derived models: obligations, alerts and payment status.

None of these are stored; they are recomputed from a snapshot.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from corent.models.enums import AlertType, ObligationKind, Severity
from corent.models.period import Period


@dataclass(frozen=True)
class Obligation:
    """A recurring payment expected for one period."""

    subject_id: str  # Roommate ID for rent, property ID for mortgage
    property_id: str
    kind: ObligationKind
    period: Period
    expected_amount: Decimal
    due_day: int | None = None

    @property
    def due_date(self) -> date | None:
        if self.due_day is None:
            return None
        return self.period.day(self.due_day)


@dataclass(frozen=True)
class Alert:
    """Unmet obligation shown on the dashboard."""

    alert_type: AlertType
    severity: Severity
    title: str
    description: str
    property_id: str
    expected_amount: Decimal
    period: Period
    roommate_id: str | None = None


@dataclass(frozen=True)
class PaymentStatus:
    """Rent payment state of one roommate for a period."""

    paid: bool
    amount: Decimal
