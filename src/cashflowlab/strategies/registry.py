"""
Strategy registry setup for CashflowLab.
"""

from cashflowlab.core.errors import ConfigError
from cashflowlab.core.interfaces import IRecurrenceStrategy
from cashflowlab.core.kinds import F
from cashflowlab.core.recurrence import RecurrenceRegistry

from .recurrence.biweekly import RecurrenceBiweekly
from .recurrence.daily import RecurrenceDaily
from .recurrence.monthly import RecurrenceMonthly
from .recurrence.once import RecurrenceOnce
from .recurrence.weekly import RecurrenceWeekly


def register_strategy(frequency: str, strategy: IRecurrenceStrategy) -> None:
    """
    Register (or replace) the recurrence strategy for a frequency.

    Raises:
        ConfigError: If ``strategy`` does not implement IRecurrenceStrategy
    """
    if not isinstance(strategy, IRecurrenceStrategy):
        raise ConfigError(
            f"Strategy for '{frequency}' must implement fires() and occurrences_per_week()"
        )
    RecurrenceRegistry[frequency] = strategy


def register_defaults():
    """
    Register all default recurrence strategies in the global registry.

    Registered Strategies:
        - 'once': Single firing on on_date (or start_date)
        - 'daily': Every day, optionally weekdays only
        - 'weekly': Configured weekdays every week
        - 'biweekly': Configured weekdays every other week
        - 'monthly': Day of month (clamped) or nth weekday

    Note:
        This function is automatically called when ``cashflowlab.strategies``
        is imported. Additional frequencies can be added with
        ``register_strategy``.
    """
    RecurrenceRegistry[F.ONCE] = RecurrenceOnce()
    RecurrenceRegistry[F.DAILY] = RecurrenceDaily()
    RecurrenceRegistry[F.WEEKLY] = RecurrenceWeekly()
    RecurrenceRegistry[F.BIWEEKLY] = RecurrenceBiweekly()
    RecurrenceRegistry[F.MONTHLY] = RecurrenceMonthly()
