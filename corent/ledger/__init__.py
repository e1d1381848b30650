"""Recurring obligation evaluation and mortgage transaction generation."""

from corent.ledger.evaluator import (
    evaluate_obligations,
    has_mortgage_payment,
    has_rent_payment,
    list_obligations,
    roommate_payment_status,
    sort_alerts,
)
from corent.ledger.generator import (
    GenerationResult,
    SkipReason,
    create_automatic_mortgage_transactions,
    generate_due_mortgage_transactions,
)

__all__ = [
    "GenerationResult",
    "SkipReason",
    "create_automatic_mortgage_transactions",
    "evaluate_obligations",
    "generate_due_mortgage_transactions",
    "has_mortgage_payment",
    "has_rent_payment",
    "list_obligations",
    "roommate_payment_status",
    "sort_alerts",
]
