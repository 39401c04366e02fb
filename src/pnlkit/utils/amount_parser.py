"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def to_decimal(value) -> Decimal:
    """Convert a numeric value to Decimal without float drift.

    Floats are converted through their string form, so 0.1 becomes
    Decimal("0.1") rather than its binary expansion.

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Could not convert {value!r} to an amount")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        return parse_amount(value)
    raise ValueError(f"Could not convert {value!r} to an amount")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles US and European notations:
    - "123.45"
    - "-123,45"
    - "€ 1.234,56"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    When both separators are present, the last one is the decimal separator.
    A lone comma is a decimal separator unless it is followed by exactly
    three digits more than once (e.g. "1,234,567").

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and inner whitespace
    amount_str = re.sub(r"[$€£¥\s]", "", amount_str)
    amount_str = amount_str.replace("EUR", "")

    if "," in amount_str and "." in amount_str:
        if amount_str.rfind(",") > amount_str.rfind("."):
            amount_str = amount_str.replace(".", "").replace(",", ".")
        else:
            amount_str = amount_str.replace(",", "")
    elif "," in amount_str:
        if re.fullmatch(r"-?\d{1,3}(,\d{3}){2,}", amount_str):
            amount_str = amount_str.replace(",", "")
        else:
            amount_str = amount_str.replace(",", ".")
    elif re.fullmatch(r"-?\d{1,3}(\.\d{3}){2,}", amount_str):
        amount_str = amount_str.replace(".", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount
