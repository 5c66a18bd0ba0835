"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and a few
    relative ones: "today", "yesterday", "tomorrow", "next week",
    "next month", "in N days".

    Args:
        date_str: Date string in various formats
        today: Reference date for relative dates (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "next week": today + timedelta(days=7),
        "next month": today + relativedelta(months=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    # "in 3 days"
    parts = date_str.split()
    if len(parts) == 3 and parts[0] == "in" and parts[2] in ("day", "days") and parts[1].isdigit():
        return today + timedelta(days=int(parts[1]))

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
