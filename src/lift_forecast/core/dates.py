"""
Date helpers.

The engine never reads the wall clock; callers pass ``today`` in.
"""

import calendar
import re
from datetime import date, datetime, timedelta

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_iso_date(date_str: str) -> None:
    """Validate date string is ISO format YYYY-MM-DD."""
    if not isinstance(date_str, str) or not _ISO_DATE.match(date_str):
        raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date: {date_str}") from e


def parse_date(date_str: str) -> date:
    """Parse a YYYY-MM-DD string into a date."""
    return datetime.strptime(date_str, "%Y-%m-%d").date()


def format_date(d: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return d.strftime("%Y-%m-%d")


def add_days(date_str: str, days: int) -> str:
    """Shift an ISO date string by a number of days."""
    return format_date(parse_date(date_str) + timedelta(days=days))


def days_between(start: str | date, end: str | date) -> int:
    """Whole days from ``start`` to ``end`` (negative if end is earlier)."""
    if isinstance(start, str):
        start = parse_date(start)
    if isinstance(end, str):
        end = parse_date(end)
    return (end - start).days


def add_months(d: date, months: int) -> date:
    """
    Shift a date by whole calendar months.

    The day is clamped to the last day of the target month,
    so 2024-08-31 + 6 months is 2025-02-28.
    """
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
