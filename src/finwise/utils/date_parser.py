"""Date parsing utilities."""

from datetime import date, datetime
from enum import Enum

from dateutil import parser as date_parser

from finwise.domain.errors import InvalidDate


class DateFormat(str, Enum):
    """Date conventions used by bank exports."""

    DD_MM_YYYY = "DD-MM-YYYY"
    YYYY_MM_DD = "YYYY-MM-DD"
    ISO = "ISO"


# (day, month, year) positions for the strict dash-separated formats
_COMPONENT_ORDER = {
    DateFormat.DD_MM_YYYY: (0, 1, 2),
    DateFormat.YYYY_MM_DD: (2, 1, 0),
}

# Two defaults differing in year, month and day; only a complete date parses
# to the same value under both.
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _parse_components(date_str: str, date_format: DateFormat) -> date:
    parts = date_str.split("-")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise InvalidDate(f"Invalid date format: '{date_str}' (expected {date_format.value})")

    day_pos, month_pos, year_pos = _COMPONENT_ORDER[date_format]
    day, month, year = int(parts[day_pos]), int(parts[month_pos]), int(parts[year_pos])

    try:
        result = date(year, month, day)
    except ValueError as e:
        raise InvalidDate(f"Invalid date: '{date_str}': {e}")

    if (result.day, result.month, result.year) != (day, month, year):
        raise InvalidDate(f"Invalid date: '{date_str}'")
    return result


def parse_date(date_str: str, date_format: DateFormat = DateFormat.DD_MM_YYYY) -> date:
    """Parse a bank export date string into a date object.

    Supports:
    - ``DD-MM-YYYY``: "15-01-2024" (ING exports)
    - ``YYYY-MM-DD``: "2024-01-15"
    - ``ISO``: anything python-dateutil understands that names a year, month
      and day, e.g. "2024-01-15 10:32:11"; "2024-01" is rejected

    The strict formats require exactly three numeric components that form a
    real calendar date, so "31-04-2024" is rejected rather than rolled over.

    Args:
        date_str: Date string
        date_format: Expected convention

    Returns:
        Date object

    Raises:
        InvalidDate: If date string cannot be parsed
    """
    if date_str is None or not str(date_str).strip():
        raise InvalidDate("Empty date string")

    date_str = str(date_str).strip()
    date_format = DateFormat(date_format)

    if date_format in _COMPONENT_ORDER:
        return _parse_components(date_str, date_format)

    try:
        first = date_parser.parse(date_str, default=_FILL_DEFAULTS[0]).date()
        second = date_parser.parse(date_str, default=_FILL_DEFAULTS[1]).date()
    except (ValueError, OverflowError, TypeError) as e:
        raise InvalidDate(f"Could not parse date '{date_str}': {e}")

    # A component missing from the string is taken from the default
    if first != second:
        raise InvalidDate(f"Incomplete date: '{date_str}' (year, month and day are required)")
    return first
