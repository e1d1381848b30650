"""Tests for domain models, periods, clocks and formatting."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from corent.clock import FixedClock, SystemClock
from corent.exceptions import InvalidInputError
from corent.formatting import format_currency
from corent.models import (
    CREDIT_CATEGORY,
    Event,
    Obligation,
    ObligationKind,
    Period,
    PropertyStatus,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
)
from corent.models.period import last_periods


class TestPeriod:
    """Tests for Period."""

    def test_of_date(self) -> None:
        assert Period.of(date(2024, 6, 10)) == Period(2024, 6)

    def test_of_datetime(self) -> None:
        assert Period.of(datetime(2024, 6, 10, 23, 59)) == Period(2024, 6)

    def test_of_rejects_non_date(self) -> None:
        with pytest.raises(InvalidInputError):
            Period.of("2024-06-10")  # type: ignore[arg-type]

    def test_invalid_month(self) -> None:
        with pytest.raises(InvalidInputError):
            Period(2024, 13)

    def test_parse(self) -> None:
        assert Period.parse("2024-06") == Period(2024, 6)
        with pytest.raises(InvalidInputError):
            Period.parse("june")

    def test_bounds(self) -> None:
        period = Period(2024, 2)
        assert period.start == date(2024, 2, 1)
        assert period.end == date(2024, 2, 29)  # leap year
        assert period.length == 29

    def test_contains(self) -> None:
        period = Period(2024, 6)
        assert period.contains(date(2024, 6, 1))
        assert period.contains(date(2024, 6, 30))
        assert not period.contains(date(2024, 7, 1))
        assert not period.contains(date(2023, 6, 15))

    def test_day_clamped_to_month_end(self) -> None:
        assert Period(2023, 2).day(31) == date(2023, 2, 28)
        assert Period(2024, 4).day(31) == date(2024, 4, 30)
        assert Period(2024, 6).day(5) == date(2024, 6, 5)

    def test_day_rejects_zero(self) -> None:
        with pytest.raises(InvalidInputError):
            Period(2024, 6).day(0)

    def test_shift_across_years(self) -> None:
        assert Period(2024, 12).next() == Period(2025, 1)
        assert Period(2024, 1).previous() == Period(2023, 12)
        assert Period(2024, 6).shift(-18) == Period(2022, 12)

    def test_ordering_and_str(self) -> None:
        assert Period(2024, 5) < Period(2024, 6) < Period(2025, 1)
        assert str(Period(2024, 6)) == "2024-06"

    def test_french_label(self) -> None:
        assert Period(2024, 6).label() == "juin 2024"
        assert Period(2024, 8).label() == "août 2024"

    def test_last_periods(self) -> None:
        periods = last_periods(Period(2024, 2), 3)
        assert periods == [Period(2023, 12), Period(2024, 1), Period(2024, 2)]


class TestProperty:
    """Tests for Property mortgage configuration."""

    def test_complete_mortgage(self, make_property) -> None:
        prop = make_property()
        assert prop.has_mortgage
        assert prop.is_active

    @pytest.mark.parametrize(
        "missing", ["monthly_credit", "credit_debit_day", "credit_start_date"]
    )
    def test_incomplete_mortgage(self, make_property, missing: str) -> None:
        prop = make_property(**{missing: None})
        assert not prop.has_mortgage

    def test_zero_credit_still_counts_as_configured(self, make_property) -> None:
        assert make_property(monthly_credit=Decimal("0")).has_mortgage

    def test_inactive(self, make_property) -> None:
        assert not make_property(status=PropertyStatus.INACTIVE).is_active


class TestRoommate:
    def test_full_name(self, make_roommate) -> None:
        assert make_roommate().full_name == "Camille Martin"
        assert make_roommate(first_name="", last_name="Martin").full_name == "Martin"


class TestTransaction:
    def test_period_and_direction(self, make_rent_payment, make_mortgage_payment) -> None:
        rent = make_rent_payment()
        assert rent.period == Period(2024, 6)
        assert rent.is_revenue and not rent.is_expense
        assert make_mortgage_payment().is_expense

    def test_draft_dedup_key(self) -> None:
        draft = TransactionDraft(
            property_id="prop-001",
            transaction_type=TransactionType.EXPENSE,
            amount=Decimal("800"),
            date=date(2024, 6, 5),
            status=TransactionStatus.COMPLETED,
            category=CREDIT_CATEGORY,
            description="Remboursement crédit",
        )
        assert draft.dedup_key == ("prop-001", "2024-06", "credit", True)


class TestObligation:
    def test_due_date(self) -> None:
        obligation = Obligation(
            subject_id="prop-001",
            property_id="prop-001",
            kind=ObligationKind.MORTGAGE,
            period=Period(2024, 2),
            expected_amount=Decimal("800"),
            due_day=30,
        )
        assert obligation.due_date == date(2024, 2, 29)

    def test_rent_has_no_due_date(self) -> None:
        obligation = Obligation(
            subject_id="room-001",
            property_id="prop-001",
            kind=ObligationKind.RENT,
            period=Period(2024, 6),
            expected_amount=Decimal("500"),
        )
        assert obligation.due_date is None


class TestEvent:
    def test_event_creation(self) -> None:
        now = datetime.now()
        event = Event(
            event_id="evt-001",
            event_type="transaction.created",
            event_time=now,
            source="corent.ledger",
            subject="tx-001",
            data={"id": "tx-001"},
        )
        assert event.event_type == "transaction.created"
        assert event.metadata == {}

    def test_create(self) -> None:
        event = Event.create("transaction.created", "tx-001", {"id": "tx-001"}, property_id="prop-001")

        assert event.source == "corent"
        assert event.metadata == {"property_id": "prop-001"}
        assert event.event_time.tzinfo is not None
        assert event.event_id != Event.create("transaction.created", "tx-001", {}).event_id


class TestClock:
    def test_fixed_clock(self) -> None:
        clock = FixedClock(date(2024, 6, 10))
        assert clock.today() == date(2024, 6, 10)
        clock.advance_to(date(2024, 7, 1))
        assert clock.today() == date(2024, 7, 1)

    def test_fixed_clock_accepts_datetime(self) -> None:
        assert FixedClock(datetime(2024, 6, 10, 8, 30)).today() == date(2024, 6, 10)

    def test_system_clock(self) -> None:
        assert SystemClock().today() == date.today()


class TestFormatCurrency:
    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (Decimal("500"), "500,00 €"),
            (Decimal("1234.5"), "1 234,50 €"),
            (Decimal("1234567.891"), "1 234 567,89 €"),
            (Decimal("-80"), "-80,00 €"),
            (0, "0,00 €"),
        ],
    )
    def test_format(self, amount, expected: str) -> None:
        assert format_currency(amount) == expected
