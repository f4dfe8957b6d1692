"""
Date utilities for CashflowLab.

All dates are naive Gregorian calendar days. Documents key them as
``YYYY-MM-DD`` strings (YMD), which compare correctly as plain strings; the
engine works on ``datetime.date`` objects internally.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterator
from datetime import date, datetime, timedelta

import numpy as np
import pandas as pd

_YMD_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LOOSE_YMD_RE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}$")
_US_DATE_RE = re.compile(r"^\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}$")

# Excel's day zero; serials above 59 include the phantom 1900-02-29.
_EXCEL_EPOCH = datetime(1899, 12, 31)


def parse_ymd(value) -> date | None:
    """
    Parse a YMD string (or pass through a date) into a ``datetime.date``.

    Returns None for anything that is not a real calendar day written as
    ``YYYY-MM-DD``. ``datetime`` instances are truncated to their date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _YMD_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def to_ymd(value: date) -> str:
    """Format a date as ``YYYY-MM-DD``."""
    return value.strftime("%Y-%m-%d")


def is_valid_ymd(value) -> bool:
    """True when ``value`` is a string naming a real calendar day as YMD."""
    return isinstance(value, str) and parse_ymd(value) is not None


def compare_ymd(a, b) -> int:
    """Compare two YMD strings lexicographically (-1, 0 or 1)."""
    a = str(a or "")
    b = str(b or "")
    return (a > b) - (a < b)


def add_days(ymd: str, days: int = 0) -> str:
    """
    Add days to a YMD string.

    Invalid dates or non-integral offsets return the input unchanged.
    """
    parsed = parse_ymd(ymd)
    if parsed is None:
        return ymd
    try:
        delta = int(days or 0)
    except (TypeError, ValueError, OverflowError):
        return ymd
    return to_ymd(parsed + timedelta(days=delta))


def subtract_days(ymd: str, days: int = 0) -> str:
    """Subtract days from a YMD string."""
    try:
        delta = int(days or 0)
    except (TypeError, ValueError, OverflowError):
        return ymd
    return add_days(ymd, -delta)


def is_weekend(value) -> bool:
    """True for Saturday or Sunday; False for anything unparsable."""
    parsed = parse_ymd(value)
    if parsed is None:
        return False
    return parsed.weekday() >= 5


def roll_weekend(ymd: str, policy: str = "forward") -> str:
    """
    Move a weekend date to a business day.

    Args:
        ymd: Date to adjust
        policy: 'forward' (next Monday), 'back' (previous Friday) or 'none'

    Returns:
        The adjusted YMD string; weekdays and invalid input are returned as-is
    """
    parsed = parse_ymd(ymd)
    if parsed is None or parsed.weekday() < 5 or policy not in ("forward", "back"):
        return ymd
    step = timedelta(days=1 if policy == "forward" else -1)
    while parsed.weekday() >= 5:
        parsed += step
    return to_ymd(parsed)


def next_business_day(ymd: str, direction: str = "forward") -> str:
    """Return the next (or previous, with direction='back') weekday after ``ymd``."""
    parsed = parse_ymd(ymd)
    if parsed is None:
        return ymd
    step = timedelta(days=-1 if direction == "back" else 1)
    candidate = parsed + step
    while candidate.weekday() >= 5:
        candidate += step
    return to_ymd(candidate)


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def months_between(start: date | None, end: date | None) -> int:
    """
    Whole calendar months from ``start`` to ``end``, floored at 0.

    Only the year and month fields count: 2025-01-31 to 2025-02-01 is one
    month, 2025-01-01 to 2025-01-31 is zero.
    """
    if not isinstance(start, date) or not isinstance(end, date):
        return 0
    diff = (end.year - start.year) * 12 + (end.month - start.month)
    return max(0, diff)


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""
    cursor = start
    one = timedelta(days=1)
    while cursor <= end:
        yield cursor
        cursor += one


def day_range(start: date | str, end: date | str) -> np.ndarray:
    """
    Generate an inclusive range of daily dates.

    **Args:**
        start: First day (date or YMD string)
        end: Last day (date or YMD string)

    **Returns:**
        A numpy array of ``datetime64[D]``; empty when ``end`` precedes ``start``

    **Example:**
        ```python
        from cashflowlab.core.dates import day_range

        days = day_range("2025-01-30", "2025-02-02")
        # ['2025-01-30' '2025-01-31' '2025-02-01' '2025-02-02']
        ```
    """
    s = np.datetime64(parse_ymd(start) or start, "D")
    e = np.datetime64(parse_ymd(end) or end, "D")
    if e < s:
        return np.array([], dtype="datetime64[D]")
    return s + np.arange((e - s).astype(int) + 1).astype("timedelta64[D]")


def parse_excel_or_iso_date(value) -> str | None:
    """
    Parse an Excel serial, ISO-like or US-style date into YMD.

    Handles:
    - ``date``/``datetime`` objects
    - Excel serial numbers (including the 1900 leap-year bug)
    - ``YYYY-M-D`` with or without zero padding
    - ``M/D/YY`` and ``M-D-YYYY``; two-digit years pivot at 70
    - anything else pandas can parse

    Returns:
        YMD string or None when the value cannot be interpreted
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (date, datetime)):
        return to_ymd(value)
    if isinstance(value, (int, float)):
        serial = float(value)
        if serial != serial or serial in (float("inf"), float("-inf")):
            return None
        whole = int(serial)
        frac = serial - whole
        days = whole - 1 if whole > 59 else whole
        try:
            moment = _EXCEL_EPOCH + timedelta(days=days, seconds=round(frac * 86400))
        except OverflowError:
            return None
        return to_ymd(moment)

    text = str(value).strip()
    if not text:
        return None
    if _LOOSE_YMD_RE.match(text):
        year, month, day = (int(part) for part in text.split("-"))
        try:
            return to_ymd(date(year, month, day))
        except ValueError:
            return None

    head = text.split()[0]
    if _US_DATE_RE.match(head):
        month, day, year = (int(part) for part in re.split(r"[/\-]", head))
        if year < 100:
            year += 1900 if year >= 70 else 2000
        try:
            return to_ymd(date(year, month, day))
        except ValueError:
            return None

    parsed = pd.to_datetime(text, errors="coerce")
    if parsed is None or pd.isna(parsed):
        return None
    return to_ymd(parsed.date())


WEEKDAY_NAMES = {
    "mon": 0,
    "tue": 1,
    "wed": 2,
    "thu": 3,
    "fri": 4,
    "sat": 5,
    "sun": 6,
}


def parse_weekday(value, sunday_first: bool = False) -> int | None:
    """
    Interpret a weekday as an index (0=Monday .. 6=Sunday).

    Accepts integers in range, numeric strings and English day names or
    three-letter abbreviations. Anything else yields None.

    With ``sunday_first`` numeric input counts from 0=Sunday, the numbering of
    the legacy ``dayOfWeek`` and ``nthWeekday`` fields; day names are unaffected.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int):
        if not 0 <= value <= 6:
            return None
        return (value - 1) % 7 if sunday_first else value
    text = str(value).strip().lower()
    if not text:
        return None
    if text.isdigit():
        return parse_weekday(int(text), sunday_first)
    index = WEEKDAY_NAMES.get(text[:3])
    if index is None or not calendar.day_name[index].lower().startswith(text):
        return None
    return index


def normalize_weekdays(value, sunday_first: bool = False) -> tuple[int, ...]:
    """
    Normalize a weekday selection into a sorted tuple of unique indices.

    Accepts a single value, an iterable, or a comma/space separated string.
    Unrecognised items are skipped. ``sunday_first`` is passed on to
    :func:`parse_weekday`.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        raw = [part for part in re.split(r"[\s,]+", value) if part]
    elif isinstance(value, (list, tuple, set, frozenset)):
        raw = list(value)
    else:
        raw = [value]
    parsed = (parse_weekday(item, sunday_first) for item in raw)
    days = {day for day in parsed if day is not None}
    return tuple(sorted(days))


def parse_nth(value) -> int | str | None:
    """
    Normalize an nth-weekday ordinal.

    Returns an int in 1..5, the string 'last', or None when malformed.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "last":
            return "last"
        if not text.isdigit():
            return None
        value = int(text)
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int) and 1 <= value <= 5:
        return value
    return None
