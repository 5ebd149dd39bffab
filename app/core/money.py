"""Fixed-point helpers for monetary and rate values."""

from decimal import ROUND_HALF_UP, Decimal

WHOLE_UNIT = Decimal("1")


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a stored or user-supplied number to Decimal.

    Floats go through ``str`` so 1.4 becomes Decimal("1.4"), not its
    binary expansion. ``None`` is treated as zero.
    """
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_whole(value: Decimal) -> int:
    """Round to whole currency units, halves away from zero."""
    return int(value.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP))


def format_money(value: Decimal | int) -> str:
    """Format an amount as dollars with thousands separators: $4,000 / $99.50."""
    amount = to_decimal(value)
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    if amount == amount.to_integral_value():
        return f"{sign}${int(amount):,}"
    return f"{sign}${amount.quantize(Decimal('0.01')):,}"


def format_points(value: int) -> str:
    """Format a point count with thousands separators: 75,000."""
    return f"{value:,}"
