"""Date parsing and formatting utilities."""

from datetime import date, datetime, timedelta
from typing import Optional
from dateutil import parser as date_parser

ISO_DATE_FORMAT = "%Y-%m-%d"
DISPLAY_DATE_FORMAT = "%d/%m/%Y"


def parse_date(date_str: str) -> date:
    """Parse a user-supplied date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024", ...) and the
    relative words "today", "yesterday" and "tomorrow".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO ``yyyy-mm-dd`` string (time part ignored).

    Returns None for empty or malformed input instead of raising.
    """
    if not value:
        return None
    try:
        return date_parser.isoparse(value.strip()).date()
    except (ValueError, OverflowError, TypeError):
        return None


def format_iso_date(value: Optional[date]) -> Optional[str]:
    """Format a date (or datetime) as ``yyyy-mm-dd``."""
    if value is None:
        return None
    return to_day(value).strftime(ISO_DATE_FORMAT)


def format_display_date(value: date) -> str:
    """Format a date as ``dd/mm/yyyy`` for messages."""
    return to_day(value).strftime(DISPLAY_DATE_FORMAT)


def to_day(value: date) -> date:
    """Drop the time-of-day part of a datetime; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value
