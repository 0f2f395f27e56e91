"""
Money Handling Module

Amounts are Decimal values quantized to cents. NEVER uses float for stored
balances; floats arriving from JSON are converted through their string form.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any

from .exceptions import ValidationError


CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

# Largest magnitude accepted from callers; keeps sums well inside the context precision
MAX_AMOUNT = Decimal("1000000000000.00")


def quantize(amount: Decimal, field: str = "amount") -> Decimal:
    """
    Round to two decimal places

    Raises:
        ValidationError: If the value has too many digits to hold cents
    """
    try:
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"Invalid {field}")


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """
    Convert a user-supplied value to a finite Decimal rounded to cents.
    
    Raises:
        ValidationError: If the value is missing, not numeric, not finite,
            or larger in magnitude than MAX_AMOUNT
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Invalid {field}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid {field}")
    if not amount.is_finite() or abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"Invalid {field}")
    return quantize(amount, field)


def positive_amount(value: Any, field: str = "amount") -> Decimal:
    """Convert and require a strictly positive amount"""
    amount = to_decimal(value, field)
    if amount <= ZERO:
        raise ValidationError(f"Invalid {field}")
    return amount
