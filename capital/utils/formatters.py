"""
Formatters utility.

Utility functions for normalizing amounts and formatting them in messages.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from capital.utils.exceptions import ValidationError

MONEY_QUANT = Decimal("0.01")


def format_amount(amount: Decimal | int | float, currency: str = "FCFA") -> str:
    """
    Format amount for user-facing messages.

    Whole amounts are printed without decimals.

    Args:
        amount: Amount to format
        currency: Currency label

    Returns:
        Formatted string like "3000 FCFA" or "12.50 FCFA"
    """
    value = Decimal(str(amount))
    if value == value.to_integral_value():
        text = f"{value:.0f}"
    else:
        text = f"{value:.2f}"
    return f"{text} {currency}" if currency else text


def to_money(amount: Decimal | int | float | str) -> Decimal:
    """
    Normalize an amount to two decimal places (half up).

    Args:
        amount: Raw amount

    Returns:
        Decimal with exactly two decimal places

    Raises:
        ValidationError: If amount is not a finite number
    """
    try:
        value = Decimal(str(amount)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError("Invalid amount") from None
    if not value.is_finite():
        raise ValidationError("Invalid amount")
    return value
