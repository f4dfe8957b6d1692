"""
Occurrence scanning for CashflowLab entries.

The scanner walks a definition's window day by day, asks the recurrence
matcher whether it fires and resolves each firing's amount. The previous firing
of the same walk anchors the escalator, including firings that fall before the
requested range.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, timedelta

from .amounts import resolve_amount
from .currency import to_finite
from .dates import iter_dates, parse_ymd
from .definitions import AnyEntry, OneOff, Recurring
from .recurrence import fires, window


@dataclass(frozen=True)
class Occurrence:
    """A single dated firing with its unsigned amount."""

    date: date
    amount: float


def iter_occurrences(
    definition: Recurring, start: date | str | None = None, end: date | str | None = None
) -> Iterator[Occurrence]:
    """
    Yield the occurrences of a recurring definition in date order.

    Args:
        definition: Recurring definition
        start: Optional first date of interest (date or YMD)
        end: Optional last date of interest (date or YMD)

    Yields:
        Occurrence for every firing inside both the definition window and the
        requested range
    """
    bounds = window(definition)
    if bounds is None:
        return
    first, last = bounds
    range_start = parse_ymd(start) if start is not None else None
    range_end = parse_ymd(end) if end is not None else None
    if range_end is not None:
        last = min(last, range_end)

    previous = None
    for day in iter_dates(first, last):
        if not fires(day, definition):
            continue
        if range_start is None or day >= range_start:
            yield Occurrence(day, resolve_amount(definition, day, previous))
        previous = day


def next_occurrence(
    entry: AnyEntry, from_date: date | str | None = None
) -> Occurrence | None:
    """
    First occurrence of an entry on or after ``from_date`` (default: today).

    One-offs return their own date and amount unless they lie in the past.
    Recurring entries return their first firing on or after ``from_date``.
    Returns None when there is none or its amount resolves to zero.
    """
    since = parse_ymd(from_date) if from_date is not None else date.today()
    if since is None:
        return None

    if isinstance(entry, OneOff):
        on = parse_ymd(entry.date)
        amount = abs(to_finite(entry.amount))
        if on is None or on < since or amount == 0:
            return None
        return Occurrence(on, amount)

    for occurrence in iter_occurrences(entry, start=since):
        if occurrence.amount == 0:
            return None
        return occurrence
    return None


def upcoming(
    entries: Iterable[AnyEntry], from_date: date | str, days: int = 30
) -> list[tuple[AnyEntry, Occurrence]]:
    """
    Every occurrence of ``entries`` in ``[from_date, from_date + days)``.

    Returns:
        ``(entry, occurrence)`` pairs sorted by date; ties keep input order
    """
    since = parse_ymd(from_date)
    if since is None or days <= 0:
        return []
    until = since + timedelta(days=days - 1)

    found = []
    for entry in entries:
        if isinstance(entry, OneOff):
            on = parse_ymd(entry.date)
            if on is not None and since <= on <= until:
                found.append((entry, Occurrence(on, abs(to_finite(entry.amount)))))
            continue
        for occurrence in iter_occurrences(entry, since, until):
            found.append((entry, occurrence))
    found.sort(key=lambda pair: pair[1].date)
    return found
