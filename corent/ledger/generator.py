"""Recurring mortgage transaction generator.

Once the billing day of a month has arrived, every active property with a
mortgage gets exactly one automatic ``depense``/``credit`` transaction for
that month. Deciding what to create is pure
(``generate_due_mortgage_transactions``); persisting goes through the
store's atomic ``insert_if_absent`` so concurrent sessions cannot create
duplicates.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from corent.clock import Clock
from corent.exceptions import (
    CorentError,
    InvalidInputError,
    InvalidRecordError,
    SinkError,
    StoreError,
)
from corent.ledger.evaluator import resolve_as_of
from corent.models import (
    CREDIT_CATEGORY,
    Event,
    Period,
    Property,
    PropertyStatus,
    Transaction,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
)
from corent.sinks.base import EventPublisher
from corent.store.base import Store, fetch_properties, fetch_transactions
from corent.store.records import TRANSACTIONS, draft_to_row

logger = logging.getLogger(__name__)

TransactionFinder = Callable[[str, date, date], list[Transaction]]


class SkipReason(str, Enum):
    NO_MORTGAGE = "no_mortgage"
    INACTIVE = "inactive"
    NOT_STARTED = "not_started"
    ENDED = "ended"
    NOT_DUE = "not_due"
    ALREADY_EXISTS = "already_exists"


@dataclass
class GenerationResult:
    """Outcome of one generator pass."""

    to_create: list[TransactionDraft] = field(default_factory=list)
    skipped: dict[str, SkipReason] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)


def is_automatic_mortgage(transaction: Transaction) -> bool:
    return (
        transaction.is_automatic
        and transaction.transaction_type == TransactionType.EXPENSE
        and transaction.category == CREDIT_CATEGORY
    )


def mortgage_description(prop: Property, period: Period) -> str:
    return f"Remboursement crédit {prop.name} - {period.label()}"


def _eligibility(prop: Property, as_of: date) -> SkipReason | None:
    if not prop.has_mortgage:
        return SkipReason.NO_MORTGAGE
    if prop.status != PropertyStatus.ACTIVE:
        return SkipReason.INACTIVE
    if prop.credit_start_date > as_of:
        return SkipReason.NOT_STARTED
    # The end date itself is still billable
    if prop.credit_end_date is not None and prop.credit_end_date < as_of:
        return SkipReason.ENDED
    if Period.of(as_of).day(prop.credit_debit_day) > as_of:
        return SkipReason.NOT_DUE
    return None


def generate_due_mortgage_transactions(
    properties: Iterable[Property],
    existing_transaction_finder: TransactionFinder,
    as_of: date | None = None,
    clock: Clock | None = None,
) -> GenerationResult:
    """Decide which automatic mortgage transactions are missing.

    Parameters
    ----------
    properties : Iterable[Property]
        Properties of the current user.
    existing_transaction_finder : TransactionFinder
        ``(property_id, period_start, period_end) -> transactions`` of that
        property dated within the period, bounds included.
    as_of : date | None
        Reference date. Defaults to ``clock.today()``.
    clock : Clock | None
        Time source used when ``as_of`` is not given.

    Returns
    -------
    GenerationResult
        Drafts to persist, plus why every other property was left out.
        A property whose lookup raised ``StoreError`` lands in ``failed``
        and gets no draft.
    """
    if properties is None:
        raise InvalidInputError("properties cannot be None")
    if existing_transaction_finder is None:
        raise InvalidInputError("existing_transaction_finder cannot be None")
    as_of = resolve_as_of(as_of, clock)
    period = Period.of(as_of)
    result = GenerationResult()

    for prop in properties:
        reason = _eligibility(prop, as_of)
        if reason is not None:
            result.skipped[prop.property_id] = reason
            continue

        try:
            existing = existing_transaction_finder(prop.property_id, period.start, period.end)
        except StoreError as e:
            logger.warning("Existing transaction lookup failed for %s: %s", prop.property_id, e)
            result.failed[prop.property_id] = str(e)
            continue

        if any(is_automatic_mortgage(t) and period.contains(t.date) for t in existing):
            result.skipped[prop.property_id] = SkipReason.ALREADY_EXISTS
            continue

        result.to_create.append(
            TransactionDraft(
                property_id=prop.property_id,
                transaction_type=TransactionType.EXPENSE,
                amount=prop.monthly_credit,
                date=period.day(prop.credit_debit_day),
                status=TransactionStatus.COMPLETED,
                category=CREDIT_CATEGORY,
                description=mortgage_description(prop, period),
                is_automatic=True,
            )
        )

    logger.debug(
        "Mortgage generation for %s: %d to create, %d skipped, %d failed",
        period,
        len(result.to_create),
        len(result.skipped),
        len(result.failed),
    )
    return result


def store_transaction_finder(store: Store) -> TransactionFinder:
    """Finder querying the store for automatic mortgage transactions."""

    def find(property_id: str, start: date, end: date) -> list[Transaction]:
        try:
            return fetch_transactions(
                store,
                [property_id],
                start=start,
                end=end,
                type=TransactionType.EXPENSE.value,
                categorie=CREDIT_CATEGORY,
                est_automatique=True,
            )
        except InvalidRecordError as e:
            raise StoreError(f"Malformed transaction for property {property_id}: {e}") from e

    return find


def transaction_created_event(draft: TransactionDraft, transaction_id: str) -> Event:
    return Event.create(
        "transaction.created",
        subject=transaction_id,
        data={"id": transaction_id, **draft_to_row(draft)},
        source="corent.ledger",
        property_id=draft.property_id,
        automatic=True,
    )


def create_automatic_mortgage_transactions(
    store: Store,
    user_id: str,
    as_of: date | None = None,
    clock: Clock | None = None,
    publisher: EventPublisher | None = None,
) -> int:
    """Generate and store the missing mortgage transactions of a user.

    Returns the number of transactions actually inserted. Store failures are
    logged and never raised: the next session simply tries again.
    """
    as_of = resolve_as_of(as_of, clock)

    try:
        properties = fetch_properties(store, user_id, active_only=True)
    except (StoreError, InvalidRecordError) as e:
        logger.error("Cannot load properties of user %s: %s", user_id, e, extra={"user_id": user_id})
        return 0

    result = generate_due_mortgage_transactions(
        properties, store_transaction_finder(store), as_of=as_of
    )

    created = 0
    for draft in result.to_create:
        context = {"user_id": user_id, "property_id": draft.property_id, "period": str(draft.period)}
        try:
            transaction_id = store.insert_if_absent(TRANSACTIONS, draft_to_row(draft))
        except CorentError as e:
            logger.error(
                "Cannot store mortgage transaction for %s: %s", draft.property_id, e, extra=context
            )
            continue

        if transaction_id is None:
            # Another session stored it between our lookup and insert
            logger.info(
                "Mortgage transaction for %s %s already stored",
                draft.property_id,
                draft.period,
                extra=context,
            )
            continue

        created += 1
        logger.info(
            "Created automatic mortgage transaction %s for property %s (%s)",
            transaction_id,
            draft.property_id,
            draft.period,
            extra=context,
        )
        if publisher is not None:
            _publish(publisher, transaction_created_event(draft, transaction_id))

    return created


def _publish(publisher: EventPublisher, event: Event) -> None:
    try:
        publisher.publish(event)
    except SinkError as e:
        logger.warning("Event %s not published: %s", event.event_type, e)
