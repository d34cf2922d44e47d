"""Date selection helpers."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import List, Optional

_RELATIVE_DAYS = {"yesterday": -1, "today": 0, "tomorrow": 1}


def valid_dates(year: Optional[int] = None) -> List[date]:
    """Return every calendar day of ``year`` (default: the current year)."""
    year = year or date.today().year
    first = date(year, 1, 1)
    days_in_year = 366 if calendar.isleap(year) else 365
    return [first + timedelta(days=offset) for offset in range(days_in_year)]


def parse_date(value: str, today: Optional[date] = None) -> date:
    """Parse a user supplied date.

    Accepts ``YYYY-MM-DD``, ``MM/DD`` (in the current year) and the words
    ``today``, ``yesterday`` and ``tomorrow``.
    """
    today = today or date.today()
    text = value.strip().lower()

    if text in _RELATIVE_DAYS:
        return today + timedelta(days=_RELATIVE_DAYS[text])

    try:
        if "/" in text:
            month, day = (int(part) for part in text.split("/"))
            return date(today.year, month, day)
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        pass

    raise ValueError(f"Unsupported date: {value!r} (expected YYYY-MM-DD or MM/DD)")


def month_and_day(selected: date) -> str:
    """Format a date as e.g. ``October 19``."""
    return f"{calendar.month_name[selected.month]} {selected.day}"
