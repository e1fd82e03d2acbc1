"""Date key arithmetic.

Logseq identifies journal pages by an integer date key ``YYYYMMDD``
(``journalDay``). These helpers convert between keys and ``date`` values.
"""

from __future__ import annotations

import math
from datetime import date, timedelta

from logseq_mcp.core.exceptions import InvalidInputError


def is_valid_date_key(key: int) -> bool:
    """Whether ``key`` looks like a ``YYYYMMDD`` journal key.

    Only the shape is checked (8 digits, year 1900-2100, month 1-12,
    day 1-31); ``20250231`` passes.
    """
    if isinstance(key, bool) or not isinstance(key, int):
        return False
    text = str(key)
    if len(text) != 8:
        return False
    year, month, day = int(text[:4]), int(text[4:6]), int(text[6:])
    return 1900 <= year <= 2100 and 1 <= month <= 12 and 1 <= day <= 31


def parse_date_key(key: int) -> date:
    """Convert a ``YYYYMMDD`` key to a date.

    Raises:
        InvalidInputError: the key is malformed or not a calendar date
    """
    if not is_valid_date_key(key):
        raise InvalidInputError(f"Invalid date format: {key}")
    text = str(key)
    try:
        return date(int(text[:4]), int(text[4:6]), int(text[6:]))
    except ValueError as e:
        raise InvalidInputError(f"Invalid date format: {key}") from e


def format_date_key(value: date) -> int:
    return value.year * 10000 + value.month * 100 + value.day


def add_days(key: int, days: int) -> int:
    """Shift a date key by ``days``, rolling over months and years."""
    return format_date_key(parse_date_key(key) + timedelta(days=days))


def date_range(start: int, end: int) -> list[int]:
    """All date keys from ``start`` to ``end`` inclusive; empty if reversed."""
    if start > end:
        return []
    first, last = parse_date_key(start), parse_date_key(end)
    return [format_date_key(first + timedelta(days=i)) for i in range((last - first).days + 1)]


def is_weekend(key: int) -> bool:
    return parse_date_key(key).weekday() >= 5


def _day_of_year(value: date) -> int:
    """Zero-based day of the year."""
    return (value - date(value.year, 1, 1)).days


def week_number(key: int) -> int:
    """Week of the year, counting weeks that start on Sunday.

    Week 1 is the (possibly partial) week containing January 1st.
    """
    value = parse_date_key(key)
    # Sunday = 0
    first_weekday = (date(value.year, 1, 1).weekday() + 1) % 7
    return math.ceil((_day_of_year(value) + first_weekday + 1) / 7)


def week_identifier(key: int) -> str:
    """``YYYY-Www`` with weeks counted in 7-day blocks from January 1st."""
    value = parse_date_key(key)
    return f"{value.year}-W{_day_of_year(value) // 7 + 1:02d}"


def month_identifier(key: int) -> str:
    """``YYYYMM``."""
    return str(key)[:6]
