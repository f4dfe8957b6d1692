"""
One-time recurrence strategy.
"""

from __future__ import annotations

from datetime import date

from cashflowlab.core.dates import parse_ymd
from cashflowlab.core.definitions import Recurring
from cashflowlab.core.interfaces import IRecurrenceStrategy


class RecurrenceOnce(IRecurrenceStrategy):
    """
    Fires exactly once (kind: 'once').

    The firing date is ``on_date``; when that is missing the definition fires on
    its ``start_date``. A malformed ``on_date`` never fires.
    """

    def fires(self, on: date, definition: Recurring) -> bool:
        target = definition.on_date or definition.start_date
        return parse_ymd(target) == on

    def occurrences_per_week(self, definition: Recurring) -> float:
        return 0.0
