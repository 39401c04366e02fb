"""Reporting period parsing utilities."""

from datetime import date
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

MONTH_NAMES: dict[str, int] = {
    "januari": 1,
    "january": 1,
    "jan": 1,
    "februari": 2,
    "february": 2,
    "feb": 2,
    "maart": 3,
    "march": 3,
    "mrt": 3,
    "mar": 3,
    "april": 4,
    "apr": 4,
    "mei": 5,
    "may": 5,
    "juni": 6,
    "june": 6,
    "jun": 6,
    "juli": 7,
    "july": 7,
    "jul": 7,
    "augustus": 8,
    "august": 8,
    "aug": 8,
    "september": 9,
    "sept": 9,
    "sep": 9,
    "oktober": 10,
    "october": 10,
    "okt": 10,
    "oct": 10,
    "november": 11,
    "nov": 11,
    "december": 12,
    "dec": 12,
}


def parse_month(value: Union[int, float, str, None]) -> int:
    """Parse a month number or (Dutch or English) month name.

    Args:
        value: Month as int, whole float (spreadsheet cells), numeric string
            or name such as "mrt", "maart" or "March"

    Returns:
        Month number 1-12

    Raises:
        ValueError: If value is not a recognizable month
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Could not parse month {value!r}")

    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Could not parse month {value!r}")
        value = int(value)

    if isinstance(value, str):
        text = value.strip().lower().rstrip(".")
        if text.isdigit():
            value = int(text)
        elif text in MONTH_NAMES:
            return MONTH_NAMES[text]
        else:
            raise ValueError(f"Could not parse month '{value}'")

    if not isinstance(value, int) or not 1 <= value <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {value!r}")
    return value


def parse_year(value: Union[int, str, None], minimum: int = 1, maximum: int = 9999) -> int:
    """Parse a year and check it against an inclusive range.

    Raises:
        ValueError: If value is not an integer year within the range
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Could not parse year {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise ValueError(f"Could not parse year '{value}'")
        value = int(text)
    if not isinstance(value, int) or not minimum <= value <= maximum:
        raise ValueError(f"Year must be between {minimum} and {maximum}, got {value!r}")
    return value


def resolve_period(period: str, today: Optional[date] = None) -> tuple[int, int]:
    """Get (year, month) for a relative period.

    Args:
        period: One of this-month, last-month
        today: Reference date (defaults to date.today())

    Returns:
        Tuple of (year, month)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        return today.year, today.month
    if period == "last-month":
        previous = today - relativedelta(months=1)
        return previous.year, previous.month
    raise ValueError(f"Unknown period: '{period}'. Supported periods: this-month, last-month")
