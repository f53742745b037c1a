"""Rounding and percentage helpers shared by the summaries."""

from decimal import ROUND_HALF_UP, Decimal


def percentage(count: int, total: int, places: int = 2) -> float:
    """Share of count in total as a percentage, rounded half-up.

    Returns 0.0 when total is zero.
    """
    if total == 0:
        return 0.0
    value = Decimal(count) / Decimal(total) * 100
    return float(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def round_half_up(value: float, places: int) -> float:
    """Round like a decimal calculator (0.125 -> 0.13), not banker's rounding."""
    return float(Decimal(repr(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))
