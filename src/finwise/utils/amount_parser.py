"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional
import re

from finwise.domain.errors import InvalidAmount

CENTS = Decimal("0.01")


def _uses_decimal_comma(amount_str: str) -> bool:
    """Guess whether a comma is the decimal separator."""
    if "," in amount_str and "." in amount_str:
        return amount_str.rfind(",") > amount_str.rfind(".")
    if "," in amount_str:
        return re.search(r",\d{1,2}$", amount_str) is not None
    return False


def parse_signed_amount(amount_str: str, decimal_comma: Optional[bool] = None) -> Decimal:
    """Parse an amount string into a signed Decimal.

    Handles various formats:
    - "123.45", "-123.45", "+123.45"
    - "€ 1.234,56" (decimal comma)
    - "$1,234.56" (thousands comma)
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string
        decimal_comma: True if ',' is the decimal separator, False if '.' is,
            None to detect from the string

    Returns:
        Decimal amount with two fractional digits

    Raises:
        InvalidAmount: If amount string cannot be parsed or is zero
    """
    if amount_str is None or not str(amount_str).strip():
        raise InvalidAmount("Empty amount string")

    original = str(amount_str)
    amount_str = original.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and codes
    amount_str = re.sub(r"[$€£¥]|\bEUR\b|\bUSD\b|\bGBP\b", "", amount_str, flags=re.IGNORECASE)
    amount_str = re.sub(r"\s+", "", amount_str)

    if decimal_comma is None:
        decimal_comma = _uses_decimal_comma(amount_str)

    if decimal_comma:
        amount_str = amount_str.replace(".", "").replace(",", ".")
    else:
        amount_str = amount_str.replace(",", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise InvalidAmount(f"Could not parse amount '{original}'")

    if not amount.is_finite():
        raise InvalidAmount(f"Amount '{original}' is not a finite number")
    if amount == 0:
        raise InvalidAmount(f"Amount '{original}' is zero")

    try:
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(f"Amount '{original}' is out of range")
    if amount == 0:
        raise InvalidAmount(f"Amount '{original}' rounds to zero")
    return -amount if is_negative else amount


def parse_amount(amount_str: str, decimal_comma: Optional[bool] = None) -> Decimal:
    """Parse an amount string into its absolute magnitude.

    Direction is carried separately (a debit/credit marker or the sign, see
    :func:`parse_signed_amount`), so the result is never negative.

    Args:
        amount_str: Amount string
        decimal_comma: See :func:`parse_signed_amount`

    Returns:
        Non-negative Decimal amount with two fractional digits

    Raises:
        InvalidAmount: If amount string cannot be parsed or is zero
    """
    return abs(parse_signed_amount(amount_str, decimal_comma=decimal_comma))
