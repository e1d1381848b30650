"""Tests for the obligation ledger evaluator."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from corent.clock import FixedClock
from corent.exceptions import InvalidInputError
from corent.ledger.evaluator import (
    evaluate_obligations,
    has_mortgage_payment,
    has_rent_payment,
    list_obligations,
    roommate_payment_status,
    sort_alerts,
)
from corent.models import (
    AlertType,
    ObligationKind,
    Period,
    PropertyStatus,
    RoommateStatus,
    Severity,
    TransactionStatus,
    TransactionType,
)


class TestRentCheck:
    """Rent alerts for active roommates."""

    def test_paid_roommate_has_no_alert(self, make_roommate, make_rent_payment, as_of: date) -> None:
        alerts = evaluate_obligations([], [make_roommate()], [make_rent_payment()], as_of=as_of)
        assert alerts == []

    def test_unpaid_roommate_has_one_alert(self, make_roommate, as_of: date) -> None:
        alerts = evaluate_obligations([], [make_roommate()], [], as_of=as_of)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.alert_type == AlertType.MISSING_PAYMENT
        assert alert.severity == Severity.HIGH
        assert alert.roommate_id == "room-001"
        assert alert.property_id == "prop-001"
        assert alert.expected_amount == Decimal("500")
        assert alert.period == Period(2024, 6)
        assert "500,00 €" in alert.description
        assert "juin 2024" in alert.description
        assert alert.title == "Loyer impayé: Camille Martin"

    def test_inactive_roommate_is_ignored(self, make_roommate, as_of: date) -> None:
        roommate = make_roommate(status=RoommateStatus.INACTIVE)
        assert evaluate_obligations([], [roommate], [], as_of=as_of) == []

    def test_payment_from_previous_month_does_not_count(
        self, make_roommate, make_rent_payment, as_of: date
    ) -> None:
        may_payment = make_rent_payment(date=date(2024, 5, 31))
        alerts = evaluate_obligations([], [make_roommate()], [may_payment], as_of=as_of)
        assert len(alerts) == 1

    def test_same_month_previous_year_does_not_count(
        self, make_roommate, make_rent_payment, as_of: date
    ) -> None:
        payment = make_rent_payment(date=date(2023, 6, 2))
        assert len(evaluate_obligations([], [make_roommate()], [payment], as_of=as_of)) == 1

    @pytest.mark.parametrize(
        "override",
        [
            {"status": TransactionStatus.PENDING},
            {"status": TransactionStatus.CANCELLED},
            {"category": "charges"},
            {"category": None},
            {"transaction_type": TransactionType.EXPENSE},
            {"roommate_id": "room-999"},
            {"roommate_id": None},
        ],
    )
    def test_non_qualifying_transactions(
        self, make_roommate, make_rent_payment, as_of: date, override: dict
    ) -> None:
        payment = make_rent_payment(**override)
        alerts = evaluate_obligations([], [make_roommate()], [payment], as_of=as_of)
        assert [a.alert_type for a in alerts] == [AlertType.MISSING_PAYMENT]

    def test_partial_payment_counts_as_paid(
        self, make_roommate, make_rent_payment, as_of: date
    ) -> None:
        payment = make_rent_payment(amount=Decimal("1"))
        assert evaluate_obligations([], [make_roommate()], [payment], as_of=as_of) == []

    def test_multiple_payments_still_paid(
        self, make_roommate, make_rent_payment, as_of: date
    ) -> None:
        payments = [
            make_rent_payment(transaction_id="a", amount=Decimal("250")),
            make_rent_payment(transaction_id="b", amount=Decimal("250")),
        ]
        assert evaluate_obligations([], [make_roommate()], payments, as_of=as_of) == []

    def test_exactly_one_alert_per_unpaid_roommate(
        self, make_roommate, make_rent_payment, as_of: date
    ) -> None:
        roommates = [make_roommate(roommate_id=f"room-{i:03d}") for i in range(1, 5)]
        payments = [make_rent_payment(roommate_id="room-002")]

        alerts = evaluate_obligations([], roommates, payments, as_of=as_of)

        assert sorted(a.roommate_id for a in alerts) == ["room-001", "room-003", "room-004"]


class TestMortgageCheck:
    """Late mortgage alerts."""

    def test_alert_after_billing_day(self, make_property, as_of: date) -> None:
        alerts = evaluate_obligations([make_property()], [], [], as_of=as_of)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.alert_type == AlertType.LATE_MORTGAGE
        assert alert.severity == Severity.MEDIUM
        assert alert.expected_amount == Decimal("800")
        assert alert.roommate_id is None
        assert alert.title == "Crédit non enregistré: Coloc Lyon"
        assert "800,00 €" in alert.description
        assert "prévu le 5" in alert.description

    def test_no_alert_on_billing_day(self, make_property) -> None:
        assert evaluate_obligations([make_property()], [], [], as_of=date(2024, 6, 5)) == []

    def test_no_alert_before_billing_day(self, make_property) -> None:
        assert evaluate_obligations([make_property()], [], [], as_of=date(2024, 6, 3)) == []

    def test_alert_day_after_billing_day(self, make_property) -> None:
        alerts = evaluate_obligations([make_property()], [], [], as_of=date(2024, 6, 6))
        assert len(alerts) == 1

    def test_no_alert_when_paid(self, make_property, make_mortgage_payment, as_of: date) -> None:
        alerts = evaluate_obligations(
            [make_property()], [], [make_mortgage_payment()], as_of=as_of
        )
        assert alerts == []

    def test_manual_mortgage_payment_counts(
        self, make_property, make_mortgage_payment, as_of: date
    ) -> None:
        manual = make_mortgage_payment(is_automatic=False, status=TransactionStatus.PENDING)
        assert evaluate_obligations([make_property()], [], [manual], as_of=as_of) == []

    def test_other_property_payment_does_not_count(
        self, make_property, make_mortgage_payment, as_of: date
    ) -> None:
        other = make_mortgage_payment(property_id="prop-002")
        assert len(evaluate_obligations([make_property()], [], [other], as_of=as_of)) == 1

    def test_incomplete_configuration_has_no_alert(self, make_property, as_of: date) -> None:
        prop = make_property(credit_start_date=None)
        assert evaluate_obligations([prop], [], [], as_of=as_of) == []

    def test_inactive_property_has_no_alert(self, make_property, as_of: date) -> None:
        prop = make_property(status=PropertyStatus.INACTIVE)
        assert evaluate_obligations([prop], [], [], as_of=as_of) == []

    def test_billing_day_past_month_end(self, make_property) -> None:
        prop = make_property(credit_debit_day=31)
        assert evaluate_obligations([prop], [], [], as_of=date(2024, 2, 29)) == []
        assert evaluate_obligations([prop], [], [], as_of=date(2024, 4, 30)) == []
        assert evaluate_obligations([prop], [], [], as_of=date(2024, 5, 30)) == []
        day_30 = make_property(credit_debit_day=30)
        assert evaluate_obligations([day_30], [], [], as_of=date(2024, 2, 29)) == []
        assert len(evaluate_obligations([day_30], [], [], as_of=date(2024, 1, 31))) == 1


class TestEvaluateObligations:
    """Contract of evaluate_obligations."""

    def test_empty_collections(self, as_of: date) -> None:
        assert evaluate_obligations([], [], [], as_of=as_of) == []

    @pytest.mark.parametrize("position", [0, 1, 2])
    def test_none_collection_fails_fast(self, as_of: date, position: int) -> None:
        args: list = [[], [], []]
        args[position] = None
        with pytest.raises(InvalidInputError):
            evaluate_obligations(*args, as_of=as_of)

    def test_as_of_must_be_a_date(self) -> None:
        with pytest.raises(InvalidInputError):
            evaluate_obligations([], [], [], as_of="2024-06-10")  # type: ignore[arg-type]

    def test_timestamp_as_of(self, make_property, make_roommate) -> None:
        alerts = evaluate_obligations(
            [make_property()], [make_roommate()], [], as_of=datetime(2024, 6, 10, 9, 30)
        )

        assert [a.alert_type for a in alerts] == [
            AlertType.MISSING_PAYMENT,
            AlertType.LATE_MORTGAGE,
        ]
        assert alerts[0].period == Period(2024, 6)

    def test_timestamp_on_billing_day_is_not_late(self, make_property) -> None:
        as_of = datetime(2024, 6, 5, 23, 59)
        assert evaluate_obligations([make_property()], [], [], as_of=as_of) == []

    def test_clock_supplies_as_of(self, make_property) -> None:
        before = evaluate_obligations([make_property()], [], [], clock=FixedClock(date(2024, 6, 3)))
        after = evaluate_obligations([make_property()], [], [], clock=FixedClock(date(2024, 6, 10)))
        assert before == []
        assert len(after) == 1

    def test_rent_alerts_come_first(self, make_property, make_roommate, as_of: date) -> None:
        alerts = evaluate_obligations([make_property()], [make_roommate()], [], as_of=as_of)
        assert [a.alert_type for a in alerts] == [
            AlertType.MISSING_PAYMENT,
            AlertType.LATE_MORTGAGE,
        ]

    def test_accepts_generators(self, make_roommate, as_of: date) -> None:
        alerts = evaluate_obligations(iter([]), (r for r in [make_roommate()]), iter([]), as_of=as_of)
        assert len(alerts) == 1

    def test_sort_alerts_by_severity(self, make_property, make_roommate, as_of: date) -> None:
        alerts = evaluate_obligations([make_property()], [make_roommate()], [], as_of=as_of)
        ordered = sort_alerts(reversed(alerts))
        assert [a.severity for a in ordered] == [Severity.HIGH, Severity.MEDIUM]


class TestPredicatesAndStatus:
    def test_has_rent_payment(self, make_roommate, make_rent_payment) -> None:
        assert has_rent_payment(make_roommate(), [make_rent_payment()], Period(2024, 6))
        assert not has_rent_payment(make_roommate(), [make_rent_payment()], Period(2024, 7))

    def test_has_mortgage_payment(self, make_property, make_mortgage_payment) -> None:
        assert has_mortgage_payment(make_property(), [make_mortgage_payment()], Period(2024, 6))
        assert not has_mortgage_payment(make_property(), [], Period(2024, 6))

    def test_list_obligations(self, make_property, make_roommate, as_of: date) -> None:
        roommates = [make_roommate(), make_roommate(roommate_id="room-002", status=RoommateStatus.INACTIVE)]
        properties = [make_property(), make_property(property_id="prop-002", monthly_credit=None)]

        obligations = list_obligations(properties, roommates, as_of=as_of)

        assert [(o.kind, o.subject_id) for o in obligations] == [
            (ObligationKind.RENT, "room-001"),
            (ObligationKind.MORTGAGE, "prop-001"),
        ]
        assert obligations[1].due_date == date(2024, 6, 5)

    def test_roommate_payment_status(self, make_roommate, make_rent_payment) -> None:
        roommates = [make_roommate(), make_roommate(roommate_id="room-002", rent_amount=Decimal("450"))]

        status = roommate_payment_status(roommates, [make_rent_payment()], Period(2024, 6))

        assert status["room-001"].paid
        assert status["room-001"].amount == Decimal("500")
        assert not status["room-002"].paid
        assert status["room-002"].amount == Decimal("450")
