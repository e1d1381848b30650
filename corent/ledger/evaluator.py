"""Obligation ledger evaluator.

Works out which recurring payments (roommate rent, property mortgage) are
expected for the current month and which of them have no matching
transaction yet. Everything here is a pure function of the snapshot it is
given; ``as_of`` pins "today" so results are reproducible.
"""

import logging
from collections.abc import Iterable
from datetime import date, datetime

from corent.clock import Clock, SystemClock
from corent.exceptions import InvalidInputError
from corent.formatting import format_currency
from corent.models import (
    CREDIT_CATEGORY,
    RENT_CATEGORY,
    Alert,
    AlertType,
    Obligation,
    ObligationKind,
    PaymentStatus,
    Period,
    Property,
    PropertyStatus,
    Roommate,
    Severity,
    Transaction,
    TransactionStatus,
    TransactionType,
)

logger = logging.getLogger(__name__)

SEVERITY_ORDER = {Severity.HIGH: 0, Severity.MEDIUM: 1}


def resolve_as_of(as_of: date | datetime | None, clock: Clock | None) -> date:
    """Pick the reference date: explicit value first, then the clock.

    A timestamp is reduced to its calendar day.
    """
    if as_of is None:
        as_of = (clock or SystemClock()).today()
    if isinstance(as_of, datetime):
        return as_of.date()
    if not isinstance(as_of, date):
        raise InvalidInputError(f"as_of must be a date, got {type(as_of).__name__}")
    return as_of


def _require_collection(name: str, value: Iterable | None) -> list:
    if value is None:
        raise InvalidInputError(f"{name} cannot be None")
    return list(value)


def has_rent_payment(roommate: Roommate, transactions: Iterable[Transaction], period: Period) -> bool:
    """Whether a completed rent payment from ``roommate`` is dated in ``period``.

    Only existence is checked: a partial payment counts as paid.
    """
    return any(
        t.roommate_id == roommate.roommate_id
        and t.transaction_type == TransactionType.REVENUE
        and t.category == RENT_CATEGORY
        and t.status == TransactionStatus.COMPLETED
        and period.contains(t.date)
        for t in transactions
    )


def has_mortgage_payment(
    prop: Property, transactions: Iterable[Transaction], period: Period
) -> bool:
    """Whether a mortgage expense for ``prop`` is dated in ``period``.

    Manual and automatic entries both count.
    """
    return any(
        t.property_id == prop.property_id
        and t.transaction_type == TransactionType.EXPENSE
        and t.category == CREDIT_CATEGORY
        and period.contains(t.date)
        for t in transactions
    )


def mortgage_applies(prop: Property) -> bool:
    """Active property with a complete mortgage configuration."""
    return prop.status == PropertyStatus.ACTIVE and prop.has_mortgage


def list_obligations(
    properties: Iterable[Property],
    roommates: Iterable[Roommate],
    as_of: date | None = None,
    clock: Clock | None = None,
) -> list[Obligation]:
    """Obligations expected in the period containing ``as_of``."""
    properties = _require_collection("properties", properties)
    roommates = _require_collection("roommates", roommates)
    period = Period.of(resolve_as_of(as_of, clock))

    obligations = [
        Obligation(
            subject_id=r.roommate_id,
            property_id=r.property_id,
            kind=ObligationKind.RENT,
            period=period,
            expected_amount=r.rent_amount,
        )
        for r in roommates
        if r.is_active
    ]
    obligations.extend(
        Obligation(
            subject_id=p.property_id,
            property_id=p.property_id,
            kind=ObligationKind.MORTGAGE,
            period=period,
            expected_amount=p.monthly_credit,
            due_day=p.credit_debit_day,
        )
        for p in properties
        if mortgage_applies(p)
    )
    return obligations


def _missing_payment_alert(roommate: Roommate, period: Period) -> Alert:
    return Alert(
        alert_type=AlertType.MISSING_PAYMENT,
        severity=Severity.HIGH,
        title=f"Loyer impayé: {roommate.full_name}",
        description=(
            f"Le loyer de {format_currency(roommate.rent_amount)} "
            f"n'a pas été enregistré pour {period.label()}"
        ),
        property_id=roommate.property_id,
        roommate_id=roommate.roommate_id,
        expected_amount=roommate.rent_amount,
        period=period,
    )


def _late_mortgage_alert(prop: Property, period: Period) -> Alert:
    return Alert(
        alert_type=AlertType.LATE_MORTGAGE,
        severity=Severity.MEDIUM,
        title=f"Crédit non enregistré: {prop.name}",
        description=(
            f"Le remboursement de crédit de {format_currency(prop.monthly_credit)} "
            f"prévu le {prop.credit_debit_day} n'a pas été enregistré"
        ),
        property_id=prop.property_id,
        expected_amount=prop.monthly_credit,
        period=period,
    )


def evaluate_obligations(
    properties: Iterable[Property],
    roommates: Iterable[Roommate],
    transactions: Iterable[Transaction],
    as_of: date | None = None,
    clock: Clock | None = None,
) -> list[Alert]:
    """Compute the alerts for unmet obligations of the current month.

    Parameters
    ----------
    properties : Iterable[Property]
        Properties of the current user.
    roommates : Iterable[Roommate]
        Roommates of those properties. Inactive ones are ignored.
    transactions : Iterable[Transaction]
        Transaction history of those properties.
    as_of : date | None
        Reference date; a ``datetime`` counts as its calendar day.
        Defaults to ``clock.today()``.
    clock : Clock | None
        Time source used when ``as_of`` is not given.

    Returns
    -------
    list[Alert]
        One ``missing_payment`` alert (high) per active roommate without a
        completed rent payment this month, then one ``late_mortgage`` alert
        (medium) per active property whose billing day has strictly passed
        without a mortgage expense this month.

    Raises
    ------
    InvalidInputError
        If a collection is ``None`` or ``as_of`` is not a date.
    """
    properties = _require_collection("properties", properties)
    roommates = _require_collection("roommates", roommates)
    transactions = _require_collection("transactions", transactions)
    as_of = resolve_as_of(as_of, clock)
    period = Period.of(as_of)

    alerts = [
        _missing_payment_alert(r, period)
        for r in roommates
        if r.is_active and not has_rent_payment(r, transactions, period)
    ]

    for prop in properties:
        if not mortgage_applies(prop):
            continue
        payment_day = period.day(prop.credit_debit_day)
        if as_of > payment_day and not has_mortgage_payment(prop, transactions, period):
            alerts.append(_late_mortgage_alert(prop, period))

    logger.debug(
        "Evaluated %d roommates and %d properties for %s: %d alerts",
        len(roommates),
        len(properties),
        period,
        len(alerts),
    )
    return alerts


def sort_alerts(alerts: Iterable[Alert]) -> list[Alert]:
    """Alerts ordered by severity tier, high first (stable within a tier)."""
    return sorted(alerts, key=lambda a: SEVERITY_ORDER[a.severity])


def roommate_payment_status(
    roommates: Iterable[Roommate],
    transactions: Iterable[Transaction],
    period: Period,
) -> dict[str, PaymentStatus]:
    """Rent payment status of each roommate for ``period``."""
    transactions = _require_collection("transactions", transactions)
    return {
        r.roommate_id: PaymentStatus(
            paid=has_rent_payment(r, transactions, period),
            amount=r.rent_amount,
        )
        for r in _require_collection("roommates", roommates)
    }
