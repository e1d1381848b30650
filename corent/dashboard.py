"""Dashboard aggregations over a transaction snapshot."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from corent.clock import Clock
from corent.config import LedgerConfig
from corent.exceptions import InvalidInputError
from corent.ledger.evaluator import resolve_as_of
from corent.models import (
    AccountTier,
    PaymentStatus,
    Period,
    Property,
    Roommate,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from corent.models.period import last_periods

CENT = Decimal("0.01")
ZERO = Decimal("0")

# Maximum number of properties per account tier, None for unlimited
PROPERTY_LIMITS: dict[AccountTier, int | None] = {
    AccountTier.FREE: 1,
    AccountTier.PLUS: 3,
    AccountTier.PRO: None,
}


@dataclass(frozen=True)
class TransactionStats:
    total_revenues: Decimal
    total_expenses: Decimal
    balance: Decimal


@dataclass
class CashFlowMonth:
    """Revenues and expenses of one month, actual or projected."""

    period: Period
    revenues: Decimal = ZERO
    expenses: Decimal = ZERO
    projected_revenues: Decimal | None = None
    projected_expenses: Decimal | None = None
    is_projection: bool = False  # Future month, no actual figures

    @property
    def balance(self) -> Decimal:
        return self.revenues - self.expenses

    @property
    def projected_balance(self) -> Decimal | None:
        if self.projected_revenues is None or self.projected_expenses is None:
            return None
        return self.projected_revenues - self.projected_expenses


@dataclass(frozen=True)
class PropertyPerformance:
    property_id: str
    name: str
    revenues: Decimal
    expenses: Decimal
    cash_flow: Decimal
    roi: Decimal | None  # Percent of the acquisition price


@dataclass(frozen=True)
class RentCollectionSummary:
    expected: Decimal
    received: Decimal
    paid_count: int
    total: int

    @property
    def paid_ratio(self) -> float:
        """Share of roommates who paid, in percent."""
        return self.paid_count / self.total * 100 if self.total else 0.0


@dataclass(frozen=True)
class DashboardSummary:
    """Headline figures of the dashboard.

    Attributes
    ----------
    roommate_count : int
        All roommates of the user's properties, inactive ones included.
    pending_payments : Decimal
        Revenues still waiting to be cashed (status ``en attente``).
    upcoming_payments : Decimal
        Monthly rent expected from the active roommates.
    """

    property_count: int
    roommate_count: int
    total_revenues: Decimal
    total_expenses: Decimal
    balance: Decimal
    pending_payments: Decimal
    upcoming_payments: Decimal


@dataclass
class MonthlyTransactions:
    """Transactions of one month, newest first, with the month's totals."""

    period: Period
    transactions: list[Transaction]
    revenues: Decimal = ZERO
    expenses: Decimal = ZERO

    @property
    def balance(self) -> Decimal:
        return self.revenues - self.expenses


def transaction_stats(transactions: Iterable[Transaction]) -> TransactionStats:
    """Total revenues, expenses and balance."""
    revenues = expenses = ZERO
    for t in transactions:
        if t.transaction_type == TransactionType.REVENUE:
            revenues += t.amount
        else:
            expenses += t.amount
    return TransactionStats(revenues, expenses, revenues - expenses)


def transactions_in_period(transactions: Iterable[Transaction], period: Period) -> list[Transaction]:
    return [t for t in transactions if period.contains(t.date)]


def dashboard_summary(
    properties: Iterable[Property],
    roommates: Iterable[Roommate],
    transactions: Iterable[Transaction],
) -> DashboardSummary:
    """Counts, totals, pending revenues and expected rent for the dashboard header."""
    transactions = list(transactions)
    roommates = list(roommates)
    stats = transaction_stats(transactions)
    pending = sum(
        (t.amount for t in transactions if t.is_revenue and t.status == TransactionStatus.PENDING),
        ZERO,
    )
    upcoming = sum((r.rent_amount for r in roommates if r.is_active), ZERO)
    return DashboardSummary(
        property_count=len(list(properties)),
        roommate_count=len(roommates),
        total_revenues=stats.total_revenues,
        total_expenses=stats.total_expenses,
        balance=stats.balance,
        pending_payments=pending,
        upcoming_payments=upcoming,
    )


def transactions_by_month(transactions: Iterable[Transaction]) -> list[MonthlyTransactions]:
    """Group transactions by calendar month.

    Only months that have transactions appear. Months are returned newest
    first, and so are the transactions inside each month.
    """
    months: dict[Period, MonthlyTransactions] = {}
    for t in transactions:
        month = months.get(t.period)
        if month is None:
            month = months[t.period] = MonthlyTransactions(period=t.period, transactions=[])
        month.transactions.append(t)
        if t.is_revenue:
            month.revenues += t.amount
        else:
            month.expenses += t.amount

    result = sorted(months.values(), key=lambda m: m.period, reverse=True)
    for month in result:
        month.transactions.sort(key=lambda t: t.date, reverse=True)
    return result


def _average(values: list[Decimal]) -> Decimal:
    if not values:
        return ZERO
    return sum(values, ZERO) / len(values)


def monthly_cash_flow(
    transactions: Iterable[Transaction],
    months: int | None = None,
    as_of: date | None = None,
    clock: Clock | None = None,
    with_projections: bool = False,
    config: LedgerConfig | None = None,
) -> list[CashFlowMonth]:
    """Cash flow of the last ``months`` months, oldest first.

    With projections, the current month also gets a projected figure that
    blends its actual amount with the average of the three previous months
    (scaled by the configured growth), and ``projected_months`` future
    months are appended, each growing from the previous projection.
    """
    config = config or LedgerConfig()
    months = months or config.cash_flow_months
    if months < 1:
        raise InvalidInputError("months must be at least 1")

    current = Period.of(resolve_as_of(as_of, clock))
    result = [CashFlowMonth(period=p) for p in last_periods(current, months)]
    by_period = {m.period: m for m in result}

    for t in transactions:
        month = by_period.get(t.period)
        if month is None:
            continue
        if t.transaction_type == TransactionType.REVENUE:
            month.revenues += t.amount
        else:
            month.expenses += t.amount

    if not with_projections:
        return result

    revenue_growth = Decimal(str(config.revenue_growth))
    expense_growth = Decimal(str(config.expense_growth))
    half = Decimal("0.5")

    previous = result[-4:-1]
    last = result[-1]
    last.projected_revenues = (
        last.revenues * half + _average([m.revenues for m in previous]) * revenue_growth * half
    ).quantize(CENT, rounding=ROUND_HALF_UP)
    last.projected_expenses = (
        last.expenses * half + _average([m.expenses for m in previous]) * expense_growth * half
    ).quantize(CENT, rounding=ROUND_HALF_UP)

    for _ in range(config.projected_months):
        prior = result[-1]
        result.append(
            CashFlowMonth(
                period=prior.period.next(),
                projected_revenues=(prior.projected_revenues * revenue_growth).quantize(
                    CENT, rounding=ROUND_HALF_UP
                ),
                projected_expenses=(prior.projected_expenses * expense_growth).quantize(
                    CENT, rounding=ROUND_HALF_UP
                ),
                is_projection=True,
            )
        )
    return result


def property_performance(
    properties: Iterable[Property],
    transactions: Iterable[Transaction],
    property_id: str | None = None,
) -> list[PropertyPerformance]:
    """Revenues, expenses, cash flow and ROI per property.

    ``property_id`` restricts the result to one property.
    """
    transactions = list(transactions)
    result = []
    for prop in properties:
        if property_id is not None and prop.property_id != property_id:
            continue
        stats = transaction_stats(t for t in transactions if t.property_id == prop.property_id)

        roi = None
        if prop.acquisition_price is not None and prop.acquisition_price > 0:
            roi = (stats.balance / prop.acquisition_price * 100).quantize(
                CENT, rounding=ROUND_HALF_UP
            )

        result.append(
            PropertyPerformance(
                property_id=prop.property_id,
                name=prop.name,
                revenues=stats.total_revenues,
                expenses=stats.total_expenses,
                cash_flow=stats.balance,
                roi=roi,
            )
        )
    return result


def rent_collection_summary(
    roommates: Iterable[Roommate],
    payment_status: dict[str, PaymentStatus],
) -> RentCollectionSummary:
    """Expected versus received rent for the roommates shown."""
    roommates = list(roommates)
    expected = sum((r.rent_amount for r in roommates), ZERO)
    statuses = [payment_status.get(r.roommate_id) for r in roommates]
    paid = [status for status in statuses if status is not None and status.paid]
    received = sum((status.amount for status in paid), ZERO)
    return RentCollectionSummary(
        expected=expected,
        received=received,
        paid_count=len(paid),
        total=len(roommates),
    )


def property_limit(tier: AccountTier) -> int | None:
    """Maximum number of properties for a tier (None: unlimited)."""
    return PROPERTY_LIMITS[AccountTier(tier)]


def can_add_property(tier: AccountTier, current_count: int) -> bool:
    limit = property_limit(tier)
    return limit is None or current_count < limit


def filter_transactions(
    transactions: Iterable[Transaction],
    types: Iterable[TransactionType] | None = None,
    start: date | None = None,
    end: date | None = None,
    search: str | None = None,
) -> list[Transaction]:
    """Filter by type, inclusive date range and free-text search.

    The search is case-insensitive and looks in the description, the
    category and the amount.
    """
    types = set(types or ())
    needle = search.lower() if search else None

    def keep(t: Transaction) -> bool:
        if types and t.transaction_type not in types:
            return False
        if start is not None and t.date < start:
            return False
        if end is not None and t.date > end:
            return False
        if needle:
            return (
                needle in (t.description or "").lower()
                or needle in (t.category or "").lower()
                or needle in str(t.amount)
            )
        return True

    return [t for t in transactions if keep(t)]
