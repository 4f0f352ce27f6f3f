"""Decimal helpers for cash amounts, prices and quantities."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from .exceptions import ValidationError

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Number, field: str = "value") -> Decimal:
    """
    Convert a number to Decimal without binary float artifacts.

    Floats go through str() so 2.00 becomes Decimal("2.0"), not
    Decimal("2.000000000000000177635683940025046").

    Raises:
        ValidationError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number, got {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValidationError(f"{field} must be a number, got {value!r}") from e
    if not result.is_finite():
        raise ValidationError(f"{field} must be finite, got {value!r}")
    return result


def require_money(value: Number, field: str = "amount") -> Decimal:
    """Validate a cash amount: finite with at most 2 fraction digits."""
    amount = to_decimal(value, field)
    if amount != amount.quantize(CENT, rounding=ROUND_HALF_UP):
        raise ValidationError(
            f"{field} must have at most 2 decimal places, got {amount}"
        )
    return amount


def require_positive(value: Number, field: str) -> Decimal:
    """Validate a strictly positive number."""
    number = to_decimal(value, field)
    if number <= 0:
        raise ValidationError(f"{field} must be positive, got {number}")
    return number


def require_non_negative(value: Number, field: str) -> Decimal:
    """Validate a number that may be zero but not negative."""
    number = to_decimal(value, field)
    if number < 0:
        raise ValidationError(f"{field} cannot be negative, got {number}")
    return number


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half up. Only used at presentation boundaries and for
    amounts that are booked to the ledger."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    """Format a Decimal with exactly two fraction digits."""
    return f"{round_money(value):.2f}"


PRICE_QUANTUM = Decimal("0.000001")


def round_price(value: Decimal) -> Decimal:
    """Round a per-share figure (price or cost basis) to storage scale."""
    return value.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)
