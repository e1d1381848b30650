#!/usr/bin/env python3
"""Run one ledger session against a sample portfolio.

Seeds a store with a synthetic portfolio, runs the session-start mortgage
generation twice (the second run must create nothing), then refreshes the
dashboard and prints alerts and totals.

Examples
--------
    python scripts/demo_session.py --date 2024-06-10
    python scripts/demo_session.py --postgres-url postgresql://localhost/corent --kafka-bootstrap localhost:9092
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from corent.clock import FixedClock, SystemClock
from corent.config import CorentConfig
from corent.dashboard import monthly_cash_flow, property_performance, rent_collection_summary
from corent.exceptions import CorentError
from corent.formatting import format_currency
from corent.logging import setup_logging
from corent.sample_data import PortfolioGenerator
from corent.session import LedgerService, StaticSession
from corent.sinks import JsonFileSink, KafkaEventSink
from corent.store import InMemoryStore, PostgresStore

logger = logging.getLogger("corent.demo")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a CoRent ledger session on sample data")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Reference date YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--user",
        type=str,
        default="demo-user",
        help="Owner ID of the generated portfolio (default: demo-user)",
    )
    parser.add_argument(
        "--properties",
        type=int,
        default=2,
        help="Number of properties to generate (default: 2)",
    )
    parser.add_argument(
        "--roommates",
        type=int,
        default=3,
        help="Roommates per property (default: 3)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--postgres-url",
        type=str,
        default=None,
        help="Use this PostgreSQL database instead of an in-memory store",
    )
    parser.add_argument(
        "--kafka-bootstrap",
        type=str,
        default=None,
        help="Publish created transactions to Kafka",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Export alerts and cash flow as JSON to this directory",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    config = CorentConfig.from_env()
    setup_logging(args.log_level or config.log_level, config.log_format)

    clock = FixedClock(args.date) if args.date else SystemClock()
    as_of = clock.today()

    if args.postgres_url:
        store = PostgresStore(args.postgres_url)
        store.ensure_constraints()
    else:
        store = InMemoryStore()

    publisher = None
    if args.kafka_bootstrap:
        config.kafka.bootstrap_servers = args.kafka_bootstrap
        publisher = KafkaEventSink(config.kafka)

    generator = PortfolioGenerator(seed=args.seed)
    counts = generator.populate(
        store,
        args.user,
        as_of,
        num_properties=args.properties,
        roommates_per_property=args.roommates,
    )
    logger.info("Seeded portfolio: %s", counts)

    service = LedgerService(store, clock=clock, publisher=publisher)
    session = StaticSession(args.user)

    created = service.on_session_start(session)
    again = service.on_session_start(session)
    print(f"Automatic mortgage transactions: {created} created, {again} on second run")

    snapshot = service.refresh_dashboard(session)
    if snapshot.error:
        print(f"Dashboard unavailable: {snapshot.error}")
        return 1

    print(f"\n{'='*60}")
    print(f"Dashboard for {args.user} - {snapshot.period.label()}")
    print("=" * 60)
    summary = snapshot.summary
    print(f"Properties: {summary.property_count}, roommates: {summary.roommate_count}")
    print(f"Revenues: {format_currency(summary.total_revenues)}")
    print(f"Expenses: {format_currency(summary.total_expenses)}")
    print(f"Balance:  {format_currency(summary.balance)}")
    print(f"Pending:  {format_currency(summary.pending_payments)}")
    print(f"Expected rent: {format_currency(summary.upcoming_payments)}")

    rent = rent_collection_summary(
        [r for r in snapshot.roommates if r.is_active], snapshot.payment_status
    )
    print(
        f"Rent: {rent.paid_count}/{rent.total} paid ({rent.paid_ratio:.0f}%), "
        f"{format_currency(rent.received)} of {format_currency(rent.expected)}"
    )

    for perf in property_performance(snapshot.properties, snapshot.transactions):
        roi = f"{perf.roi}%" if perf.roi is not None else "n/a"
        print(f"  {perf.name}: cash flow {format_currency(perf.cash_flow)}, ROI {roi}")

    print(f"\nAlerts ({len(snapshot.alerts)}):")
    for alert in snapshot.alerts:
        print(f"  [{alert.severity.value}] {alert.title} - {alert.description}")

    if args.output_dir:
        sink = JsonFileSink(args.output_dir, pretty=True)
        sink.write_batch("alerts", snapshot.alerts)
        sink.write_batch(
            "cash_flow",
            monthly_cash_flow(snapshot.transactions, as_of=as_of, with_projections=True),
        )
        sink.close()

    if publisher is not None:
        publisher.close()
    if isinstance(store, PostgresStore):
        store.close()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except CorentError as e:
        logger.error("%s", e)
        sys.exit(1)
