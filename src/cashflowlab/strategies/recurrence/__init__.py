"""
Recurrence strategies, one per frequency kind.
"""

from .biweekly import RecurrenceBiweekly
from .daily import RecurrenceDaily
from .monthly import RecurrenceMonthly
from .once import RecurrenceOnce
from .weekly import RecurrenceWeekly

__all__ = [
    "RecurrenceOnce",
    "RecurrenceDaily",
    "RecurrenceWeekly",
    "RecurrenceBiweekly",
    "RecurrenceMonthly",
]
