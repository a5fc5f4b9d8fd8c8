"""Helpers for month keys (YYYY-MM) used as rate cache keys."""

import calendar
from datetime import date, datetime
import re
from typing import Iterator

LATEST_MONTH = "latest"

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")
_DAY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def to_month_key(value: str | date) -> str:
    """Canonicalize a date-like value to a month key.

    Args:
        value: ``YYYY-MM``, ``YYYY-MM-DD``, a date, a datetime or ``latest``.

    Returns:
        str: ``YYYY-MM`` key, or the ``latest`` sentinel unchanged.

    Raises:
        ValueError: If the value is not a recognizable month or date.
    """
    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}"
    if not isinstance(value, str):
        raise ValueError(f"Invalid month: {value!r}")
    cleaned = value.strip()
    if cleaned.lower() == LATEST_MONTH:
        return LATEST_MONTH
    match = _MONTH_RE.match(cleaned) or _DAY_RE.match(cleaned)
    if not match:
        raise ValueError(f"Invalid month: {value!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {value!r}")
    return f"{year:04d}-{month:02d}"


def last_day_of_month(month: str) -> date:
    """Return the last calendar day of a month key."""
    key = to_month_key(month)
    if key == LATEST_MONTH:
        raise ValueError("The latest sentinel has no calendar day")
    year, month_num = (int(part) for part in key.split("-"))
    return date(year, month_num, calendar.monthrange(year, month_num)[1])


def iter_month_keys(start: str, end: str) -> Iterator[str]:
    """Yield every month key from ``start`` to ``end`` inclusive."""
    year, month = (int(part) for part in to_month_key(start).split("-"))
    end_year, end_month = (int(part) for part in to_month_key(end).split("-"))
    while (year, month) <= (end_year, end_month):
        yield f"{year:04d}-{month:02d}"
        month += 1
        if month > 12:
            month = 1
            year += 1


__all__ = [
    "LATEST_MONTH",
    "to_month_key",
    "last_day_of_month",
    "iter_month_keys",
]
