"""
Biweekly recurrence strategy.
"""

from __future__ import annotations

from datetime import date, timedelta

from cashflowlab.core.dates import normalize_weekdays, parse_ymd
from cashflowlab.core.definitions import Recurring
from cashflowlab.core.interfaces import IRecurrenceStrategy


def first_weekday_on_or_after(start: date, weekday: int) -> date:
    """First date on or after ``start`` falling on ``weekday``."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)


class RecurrenceBiweekly(IRecurrenceStrategy):
    """
    Fires every other week on each configured weekday (kind: 'biweekly').

    Each weekday is anchored independently on the first matching date on or
    after ``start_date``; the definition fires on the anchor and every 14 days
    after it.

    **Example:**
        Start 2025-01-01 (a Wednesday) with weekdays=(2,) fires on 2025-01-01,
        2025-01-15, 2025-01-29, ...
    """

    def fires(self, on: date, definition: Recurring) -> bool:
        start = parse_ymd(definition.start_date)
        if start is None:
            return False
        weekday = on.weekday()
        if weekday not in normalize_weekdays(definition.weekdays):
            return False
        anchor = first_weekday_on_or_after(start, weekday)
        distance = (on - anchor).days
        return distance >= 0 and distance % 14 == 0

    def occurrences_per_week(self, definition: Recurring) -> float:
        return len(normalize_weekdays(definition.weekdays)) / 2
