"""
Strategy implementations for CashflowLab.

Recurrence strategies decide whether a recurring definition fires on a given
date, keyed by the definition's ``frequency`` discriminator.

Registry System:
The module automatically registers all default strategies in the global
registry, making them available to every definition with a matching frequency.
"""

from .recurrence import (
    RecurrenceBiweekly,
    RecurrenceDaily,
    RecurrenceMonthly,
    RecurrenceOnce,
    RecurrenceWeekly,
)
from .registry import register_defaults, register_strategy

# Register all default strategies when module is imported
register_defaults()

__all__ = [
    "RecurrenceOnce",
    "RecurrenceDaily",
    "RecurrenceWeekly",
    "RecurrenceBiweekly",
    "RecurrenceMonthly",
    "register_defaults",
    "register_strategy",
]
