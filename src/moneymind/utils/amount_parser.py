"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

_CURRENCY_SYMBOLS = re.compile(r"[$€£¥\s]")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45", "-123.45", "€123.45", "-€123.45"
    - "1,234.56" (comma thousands separator)
    - "1.234,56" and "12,50" (comma decimal separator)
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    value = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if value.startswith("(") and value.endswith(")"):
        is_negative = True
        value = value[1:-1]

    value = _CURRENCY_SYMBOLS.sub("", value)

    if "," in value:
        if "." in value and value.rfind(",") < value.rfind("."):
            # 1,234.56
            value = value.replace(",", "")
        else:
            # 1.234,56 or 12,50
            value = value.replace(".", "").replace(",", ".")

    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'")

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'")
    return -amount if is_negative else amount
