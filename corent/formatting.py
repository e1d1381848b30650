"""French display formatting for alert texts."""

from decimal import ROUND_HALF_UP, Decimal


def format_currency(amount: Decimal | int | float) -> str:
    """Format an amount in euros the French way: ``1 234,50 €``."""
    quantized = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if quantized < 0 else ""
    units, cents = f"{abs(quantized):.2f}".split(".")
    groups = []
    while units:
        groups.insert(0, units[-3:])
        units = units[:-3]
    return f"{sign}{' '.join(groups)},{cents} €"
