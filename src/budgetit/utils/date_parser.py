"""Date parsing utilities."""

import calendar
import re
from datetime import date
from dateutil.relativedelta import relativedelta

_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)


def parse_iso_date(date_str: str) -> date:
    """Parse a strict ISO calendar date.

    Only "YYYY-MM-DD" is accepted, and the value must name a real day, so
    "2026-02-30" and "2026-13-01" are rejected even though they match the
    pattern.

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If the string is not a valid ISO date
    """
    if not _ISO_DATE_PATTERN.match(date_str):
        raise ValueError(f"Could not parse date '{date_str}': expected YYYY-MM-DD")

    year, month, day = (int(part) for part in date_str.split("-"))
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def is_iso_date(date_str: str) -> bool:
    """Return True if date_str is a valid YYYY-MM-DD calendar date."""
    try:
        parse_iso_date(date_str)
    except ValueError:
        return False
    return True


def clamped_date(year: int, month: int, day_of_month: int) -> date:
    """Build a date, clamping day_of_month to the last day of the month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day_of_month, last_day))


def add_months_clamped(value: date, months: int, day_of_month: int) -> date:
    """Move value forward by a number of months and pin it to day_of_month.

    The day is clamped to the length of the target month, so stepping a
    rule that fires on the 31st lands on Feb 28/29, then back on the 31st
    in March.
    """
    shifted = value + relativedelta(months=months, day=1)
    return clamped_date(shifted.year, shifted.month, day_of_month)
