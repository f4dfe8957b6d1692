"""
Recurrence matching for CashflowLab.

``fires`` is the single entry point used by the scanner and projection engine.
It enforces the definition window, dispatches on ``frequency`` through
``RecurrenceRegistry`` and fails closed: a definition with a bad window, an
unknown frequency or malformed frequency fields simply never fires.
"""

from __future__ import annotations

import logging
from datetime import date

from .dates import parse_ymd
from .definitions import Recurring
from .errors import ConfigError
from .interfaces import IRecurrenceStrategy

logger = logging.getLogger(__name__)

# frequency -> strategy; populated by cashflowlab.strategies.register_defaults()
RecurrenceRegistry: dict[str, IRecurrenceStrategy] = {}


def get_strategy(frequency: str) -> IRecurrenceStrategy:
    """
    Look up the recurrence strategy for a frequency.

    Raises:
        ConfigError: If no strategy is registered for ``frequency``
    """
    if frequency not in RecurrenceRegistry:
        raise ConfigError(f"No recurrence strategy registered for '{frequency}'")
    return RecurrenceRegistry[frequency]


def window(definition: Recurring) -> tuple[date, date] | None:
    """Parsed (start, end) window of a definition, or None when unusable."""
    start = parse_ymd(definition.start_date)
    end = parse_ymd(definition.end_date)
    if start is None or end is None or end < start:
        return None
    return start, end


def fires(on: date, definition: Recurring) -> bool:
    """
    Decide whether a recurring definition fires on a date.

    Args:
        on: Date to evaluate
        definition: Recurring definition

    Returns:
        True when ``on`` is inside the definition window and its frequency
        rule matches; False otherwise, including for malformed definitions
    """
    bounds = window(definition)
    if bounds is None or not bounds[0] <= on <= bounds[1]:
        return False
    strategy = RecurrenceRegistry.get(definition.frequency)
    if strategy is None:
        logger.debug(
            "Recurring '%s': unknown frequency '%s'", definition.id, definition.frequency
        )
        return False
    try:
        return bool(strategy.fires(on, definition))
    except (TypeError, ValueError, AttributeError) as exc:
        logger.debug("Recurring '%s' is malformed: %s", definition.id, exc)
        return False


def occurrences_per_week(definition: Recurring) -> float:
    """Estimated firings per week; 0 for unknown frequencies."""
    strategy = RecurrenceRegistry.get(definition.frequency)
    if strategy is None:
        return 0.0
    try:
        return float(strategy.occurrences_per_week(definition))
    except (TypeError, ValueError, AttributeError):
        return 0.0
