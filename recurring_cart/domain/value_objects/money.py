"""
Decimal helpers for monetary amounts.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from ..exceptions import ValidationException

ZERO = Decimal("0")


def to_decimal(value: Union[int, float, str, Decimal], field_name: str = 'amount') -> Decimal:
    """Convert a number to Decimal via its string form."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationException(
            message="Invalid amount",
            errors={field_name: ['Amount must be a valid number']}
        )


def round_amount(amount: Decimal, places: int = 2) -> Decimal:
    """Round half up to ``places`` decimal places."""
    quantize_str = '1' if places <= 0 else '0.' + '0' * places
    return to_decimal(amount).quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP)
