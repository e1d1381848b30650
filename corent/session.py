"""Entry points called by the application shell.

The generator runs once when a session starts; the evaluator runs on every
dashboard refresh. Neither ever fails the caller: store problems degrade to
"nothing created" and "no alerts".
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from corent.clock import Clock, SystemClock
from corent.dashboard import DashboardSummary, TransactionStats, dashboard_summary, transaction_stats
from corent.exceptions import CorentError, InvalidRecordError, SinkError, StoreError
from corent.ledger.evaluator import evaluate_obligations, roommate_payment_status, sort_alerts
from corent.ledger.generator import create_automatic_mortgage_transactions
from corent.models import Alert, Event, PaymentStatus, Period, Property, Roommate, Transaction
from corent.sinks.base import EventPublisher
from corent.sinks.serialization import to_dict
from corent.store.base import Store, fetch_properties, fetch_roommates, fetch_transactions

logger = logging.getLogger(__name__)


class Session(Protocol):
    """Authenticated session of the application shell."""

    def current_user_id(self) -> str | None: ...


class StaticSession:
    """Session bound to a fixed user (scripts, tests)."""

    def __init__(self, user_id: str | None) -> None:
        self.user_id = user_id

    def current_user_id(self) -> str | None:
        return self.user_id


@dataclass
class DashboardSnapshot:
    """Everything the dashboard renders for one refresh."""

    as_of: date
    properties: list[Property] = field(default_factory=list)
    roommates: list[Roommate] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    alerts: list[Alert] = field(default_factory=list)
    payment_status: dict[str, PaymentStatus] = field(default_factory=dict)
    stats: TransactionStats | None = None
    summary: DashboardSummary | None = None
    error: str | None = None

    @property
    def period(self) -> Period:
        return Period.of(self.as_of)


AlertKey = tuple[str, str, str | None, Period]


def alert_key(alert: Alert) -> AlertKey:
    """Identity of an alert across refreshes."""
    return (alert.alert_type.value, alert.property_id, alert.roommate_id, alert.period)


def alert_raised_event(alert: Alert) -> Event:
    return Event.create(
        "alert.raised",
        subject=alert.roommate_id or alert.property_id,
        data=to_dict(alert),
        source="corent.ledger",
        property_id=alert.property_id,
        severity=alert.severity.value,
    )


class LedgerService:
    """Run the ledger for the current user of a session."""

    def __init__(
        self,
        store: Store,
        clock: Clock | None = None,
        publisher: EventPublisher | None = None,
    ) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self.publisher = publisher
        # Alerts already published, per user
        self._raised_alerts: dict[str, set[AlertKey]] = {}

    def on_session_start(self, session: Session) -> int:
        """Create this month's missing mortgage transactions.

        Returns the number of transactions created, 0 when there is no user
        or the store failed.
        """
        user_id = session.current_user_id()
        if user_id is None:
            return 0

        count = create_automatic_mortgage_transactions(
            self.store, user_id, clock=self.clock, publisher=self.publisher
        )
        if count:
            logger.info(
                "%d automatic transactions created for user %s", count, user_id, extra={"user_id": user_id}
            )
        return count

    def refresh_dashboard(self, session: Session) -> DashboardSnapshot:
        """Load the user's data and compute alerts and totals."""
        as_of = self.clock.today()
        snapshot = DashboardSnapshot(as_of=as_of)
        user_id = session.current_user_id()
        if user_id is None:
            return snapshot

        try:
            properties = fetch_properties(self.store, user_id)
            property_ids = [p.property_id for p in properties]
            roommates = fetch_roommates(self.store, property_ids)
            transactions = fetch_transactions(self.store, property_ids)
        except (StoreError, InvalidRecordError) as e:
            logger.error(
                "Dashboard data unavailable for user %s: %s", user_id, e, extra={"user_id": user_id}
            )
            snapshot.error = str(e)
            return snapshot

        snapshot.properties = properties
        snapshot.roommates = roommates
        snapshot.transactions = transactions
        snapshot.stats = transaction_stats(transactions)
        snapshot.summary = dashboard_summary(properties, roommates, transactions)
        snapshot.payment_status = roommate_payment_status(
            [r for r in roommates if r.is_active], transactions, snapshot.period
        )

        try:
            alerts = evaluate_obligations(properties, roommates, transactions, as_of=as_of)
        except CorentError:
            logger.exception("Alert evaluation failed for user %s", user_id, extra={"user_id": user_id})
            return snapshot

        snapshot.alerts = sort_alerts(alerts)
        if self.publisher is not None:
            self._publish_new_alerts(user_id, snapshot.alerts)
        return snapshot

    def _publish_new_alerts(self, user_id: str, alerts: list[Alert]) -> None:
        """Publish an ``alert.raised`` event for each alert not seen on the previous refresh.

        An alert that stops firing (the payment arrived) is forgotten, so it
        is published again if it comes back. A failed publication is retried
        on the next refresh.
        """
        previous = self._raised_alerts.get(user_id, set())
        raised = set()
        for alert in alerts:
            key = alert_key(alert)
            if key not in previous:
                try:
                    self.publisher.publish(alert_raised_event(alert))
                except SinkError as e:
                    logger.warning(
                        "Alert %s not published: %s",
                        alert.alert_type.value,
                        e,
                        extra={"user_id": user_id, "property_id": alert.property_id},
                    )
                    continue
            raised.add(key)
        self._raised_alerts[user_id] = raised
