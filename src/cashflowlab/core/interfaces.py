"""
Strategy interface protocols for CashflowLab.
Defines the contract that every recurrence strategy must satisfy.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    # Only imported for type checking to avoid runtime cycles
    from .definitions import Recurring


@runtime_checkable
class IRecurrenceStrategy(Protocol):
    """
    Contract for RECURRENCE strategies (one per frequency kind).
    Responsibilities: decide whether a definition fires on a date and estimate
    how often it fires per week.
    """

    def fires(self, on: date, definition: Recurring) -> bool:
        """
        Decide whether ``definition`` fires on ``on``.

        The caller has already checked that ``on`` lies inside the definition's
        [start_date, end_date] window. Implementations return False for missing
        or malformed frequency-specific fields.
        """
        ...

    def occurrences_per_week(self, definition: Recurring) -> float:
        """Static estimate of firings per week (0 for non-periodic kinds)."""
        ...


__all__ = ["IRecurrenceStrategy"]
