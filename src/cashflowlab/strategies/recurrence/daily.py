"""
Daily recurrence strategy.
"""

from __future__ import annotations

from datetime import date

from cashflowlab.core.definitions import Recurring
from cashflowlab.core.interfaces import IRecurrenceStrategy


class RecurrenceDaily(IRecurrenceStrategy):
    """
    Fires every day of the window (kind: 'daily').

    With ``skip_weekends`` set, Saturdays and Sundays are excluded.
    """

    def fires(self, on: date, definition: Recurring) -> bool:
        if definition.skip_weekends:
            return on.weekday() < 5
        return True

    def occurrences_per_week(self, definition: Recurring) -> float:
        return 5.0 if definition.skip_weekends else 7.0
