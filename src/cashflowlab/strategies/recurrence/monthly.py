"""
Monthly recurrence strategy (by day of month or by nth weekday).
"""

from __future__ import annotations

from datetime import date

from cashflowlab.core.dates import days_in_month, parse_nth, parse_weekday
from cashflowlab.core.definitions import Recurring
from cashflowlab.core.interfaces import IRecurrenceStrategy
from cashflowlab.core.kinds import MonthlyMode

# Average number of months per week
MONTHLY_PER_WEEK = 12 / 52


def nth_weekday_of_month(year: int, month: int, weekday: int, nth) -> date | None:
    """
    Date of the ``nth`` ``weekday`` in a month.

    ``nth`` is 1..5 or 'last'. Returns None when the month has fewer matching
    days than requested (a 5th Friday in a month with only four).
    """
    matches = [
        date(year, month, day)
        for day in range(1, days_in_month(year, month) + 1)
        if date(year, month, day).weekday() == weekday
    ]
    if nth == "last":
        return matches[-1]
    if nth > len(matches):
        return None
    return matches[nth - 1]


class RecurrenceMonthly(IRecurrenceStrategy):
    """
    Fires once per month (kind: 'monthly').

    **Modes:**
        - 'day': on ``day_of_month``, clamped to the month length so that 31
          lands on Feb 28/29 and 30 Apr 30
        - 'nth': on the ``nth`` (1-5 or 'last') ``nth_weekday`` of the month;
          an ordinal past the month's count skips that month

    Missing or malformed mode fields leave the definition inert.
    """

    def fires(self, on: date, definition: Recurring) -> bool:
        if definition.monthly_mode == MonthlyMode.NTH:
            nth = parse_nth(definition.nth)
            weekday = parse_weekday(definition.nth_weekday)
            if nth is None or weekday is None:
                return False
            return nth_weekday_of_month(on.year, on.month, weekday, nth) == on

        if definition.day_of_month is None:
            return False
        day = int(definition.day_of_month)
        day = min(max(day, 1), days_in_month(on.year, on.month))
        return on.day == day

    def occurrences_per_week(self, definition: Recurring) -> float:
        return MONTHLY_PER_WEEK
