"""
Amount Handling Module

Parses and rounds monetary amounts. The demo is single-currency, so amounts
are plain Decimal values at cent precision. NEVER uses float for balances.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from typing import Any

from .errors import InvalidArgumentError

# High precision for intermediate results; rounding happens in to_amount()
getcontext().prec = 28

PRECISION = 2
ZERO = Decimal('0.00')
_QUANTUM = Decimal('0.1') ** PRECISION


def to_amount(value: Any, field_name: str = "amount") -> Decimal:
    """
    Convert a number or numeric string to a Decimal rounded to cents.

    Raises:
        InvalidArgumentError: If value is missing, a bool, or not a finite number
    """
    if value is None or isinstance(value, bool):
        raise InvalidArgumentError(f"Valid {field_name} is required")

    if isinstance(value, float):
        # Go through str() so 0.1 stays 0.1 rather than its binary expansion
        value = str(value)

    try:
        amount = Decimal(value) if not isinstance(value, Decimal) else value
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgumentError(f"Valid {field_name} is required")

    if not amount.is_finite():
        raise InvalidArgumentError(f"Valid {field_name} is required")

    try:
        return amount.quantize(_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the context precision can hold
        raise InvalidArgumentError(f"{field_name.capitalize()} is out of range")


def to_positive_amount(value: Any, field_name: str = "amount") -> Decimal:
    """Like to_amount(), but the rounded result must be strictly positive"""
    amount = to_amount(value, field_name)
    if amount <= ZERO:
        raise InvalidArgumentError(f"Valid {field_name} is required")
    return amount
