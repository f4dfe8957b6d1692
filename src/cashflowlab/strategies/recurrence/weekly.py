"""
Weekly recurrence strategy.
"""

from __future__ import annotations

from datetime import date

from cashflowlab.core.dates import normalize_weekdays
from cashflowlab.core.definitions import Recurring
from cashflowlab.core.interfaces import IRecurrenceStrategy


class RecurrenceWeekly(IRecurrenceStrategy):
    """
    Fires on each configured weekday (kind: 'weekly').

    ``weekdays`` uses 0=Monday .. 6=Sunday; an empty selection never fires.
    """

    def fires(self, on: date, definition: Recurring) -> bool:
        return on.weekday() in normalize_weekdays(definition.weekdays)

    def occurrences_per_week(self, definition: Recurring) -> float:
        return float(len(normalize_weekdays(definition.weekdays)))
