"""Money helpers.

All amounts are ``Decimal``. Rounding to cents uses ROUND_HALF_UP, so an
exact half cent always moves away from zero (10.125 -> 10.13).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENTS = Decimal("0.01")
MONTHS_PER_YEAR = Decimal("12")

# Largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def is_whole_cents(amount: Decimal) -> bool:
    """True if amount has no fraction of a cent."""
    return amount == round_to_cents(amount)


def to_decimal(value: Any) -> Decimal:
    """Coerce a stored or submitted amount to Decimal.

    Floats go through ``str`` so 0.1 becomes Decimal("0.1"), not its binary
    expansion. Raises ``ValueError`` for anything non-numeric or non-finite.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, TypeError) as exc:
            raise ValueError(f"Not an amount: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return result


def safe_salary(value: Any) -> Decimal:
    """Read an annual salary, treating missing, invalid or negative as zero."""
    if value is None:
        return ZERO
    try:
        salary = to_decimal(value)
    except ValueError:
        return ZERO
    return salary if salary > 0 else ZERO


def monthly_amount(annual_salary: Decimal) -> Decimal:
    """Monthly base pay for an annual salary, rounded to cents."""
    return round_to_cents(annual_salary / MONTHS_PER_YEAR)
