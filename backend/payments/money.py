"""
Monetary helpers.

All amounts are Decimals with two decimal places. Anything that needs
exact arithmetic (change breakdown, split tolerance) is done in integer
minor units (cents) to avoid drift.
"""

from decimal import ROUND_HALF_EVEN, Decimal
from typing import List, Union

Number = Union[Decimal, str, int, float]

CENT = Decimal("0.01")
MINOR_PER_UNIT = 100

# Cash denominations handed back as change, largest first
CHANGE_DENOMINATIONS = (
    Decimal("100"),
    Decimal("50"),
    Decimal("20"),
    Decimal("10"),
    Decimal("5"),
    Decimal("1"),
    Decimal("0.25"),
    Decimal("0.10"),
    Decimal("0.05"),
    Decimal("0.01"),
)

SPLIT_TOLERANCE = CENT


def quantize(amount: Number) -> Decimal:
    """
    Round to cents using banker's rounding (ROUND_HALF_EVEN).

    >>> quantize("10.125")
    Decimal('10.12')
    """
    if isinstance(amount, float):
        # Go through str to avoid binary float artefacts
        amount = str(amount)
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_EVEN)


def to_minor(amount: Number) -> int:
    """Quantize, then convert to integer cents."""
    return int((quantize(amount) * MINOR_PER_UNIT).to_integral_value())


def from_minor(minor: int) -> Decimal:
    return quantize(Decimal(minor) / MINOR_PER_UNIT)


def percentage_of(amount: Number, percentage: Number) -> Decimal:
    """
    ``percentage`` percent of ``amount``, rounded to cents.

    >>> percentage_of("20.00", 50)
    Decimal('10.00')
    """
    return quantize(Decimal(str(amount)) * Decimal(str(percentage)) / Decimal("100"))


def within_tolerance(a: Number, b: Number, tolerance: Decimal = SPLIT_TOLERANCE) -> bool:
    """True when ``a`` and ``b`` differ by strictly less than ``tolerance``."""
    return abs(to_minor(a) - to_minor(b)) < to_minor(tolerance)


def calculate_change_breakdown(amount: Number) -> List[dict]:
    """
    Greedy largest-first breakdown of ``amount`` over CHANGE_DENOMINATIONS.

    Each denomination divides the one above it into whole multiples of the
    smallest unit, so the greedy result is exact.

    >>> calculate_change_breakdown("4.00")
    [{'denomination': Decimal('1'), 'count': 4}]
    """
    remaining = to_minor(amount)
    breakdown = []
    if remaining <= 0:
        return breakdown
    for denomination in CHANGE_DENOMINATIONS:
        value = to_minor(denomination)
        count, remaining = divmod(remaining, value)
        if count:
            breakdown.append({"denomination": denomination, "count": count})
    return breakdown
