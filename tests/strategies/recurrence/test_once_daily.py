from __future__ import annotations

from datetime import date

import pytest

import cashflowlab.strategies  # noqa: F401 - ensure registries are wired
from cashflowlab.core.definitions import Recurring
from cashflowlab.core.errors import ConfigError
from cashflowlab.core.recurrence import (
    RecurrenceRegistry,
    fires,
    get_strategy,
    occurrences_per_week,
)
from cashflowlab.strategies.recurrence.daily import RecurrenceDaily
from cashflowlab.strategies.recurrence.once import RecurrenceOnce
from cashflowlab.strategies.registry import register_strategy


def _definition(frequency: str, **fields) -> Recurring:
    defaults = dict(
        id="item",
        name="Item",
        amount=10,
        frequency=frequency,
        start_date="2025-01-01",
        end_date="2025-01-31",
    )
    defaults.update(fields)
    return Recurring(**defaults)


class TestOnce:
    def test_fires_on_on_date_only(self):
        bonus = _definition("once", on_date="2025-01-20")

        assert fires(date(2025, 1, 20), bonus)
        assert not fires(date(2025, 1, 1), bonus)

    def test_falls_back_to_start_date(self):
        bonus = _definition("once")

        assert fires(date(2025, 1, 1), bonus)
        assert not fires(date(2025, 1, 2), bonus)

    def test_on_date_outside_window_never_fires(self):
        bonus = _definition("once", on_date="2025-02-10")

        assert not fires(date(2025, 2, 10), bonus)

    def test_zero_occurrences_per_week(self):
        assert RecurrenceOnce().occurrences_per_week(_definition("once")) == 0


class TestDaily:
    def test_fires_every_day(self):
        coffee = _definition("daily")

        assert all(fires(date(2025, 1, d), coffee) for d in range(1, 32))

    def test_skip_weekends(self):
        coffee = _definition("daily", skip_weekends=True)

        assert fires(date(2025, 1, 3), coffee)  # Friday
        assert not fires(date(2025, 1, 4), coffee)  # Saturday
        assert not fires(date(2025, 1, 5), coffee)  # Sunday
        assert fires(date(2025, 1, 6), coffee)  # Monday

    def test_occurrences_per_week(self):
        assert RecurrenceDaily().occurrences_per_week(_definition("daily")) == 7
        assert occurrences_per_week(_definition("daily", skip_weekends=True)) == 5


class TestWindowAndFailClosed:
    def test_dates_outside_window_never_fire(self):
        coffee = _definition("daily")

        assert not fires(date(2024, 12, 31), coffee)
        assert not fires(date(2025, 2, 1), coffee)

    def test_inverted_window_never_fires(self):
        coffee = _definition("daily", start_date="2025-02-01", end_date="2025-01-01")

        assert not fires(date(2025, 1, 15), coffee)

    def test_malformed_window_never_fires(self):
        coffee = _definition("daily", start_date="01/01/2025")

        assert not fires(date(2025, 1, 15), coffee)

    def test_unknown_frequency_never_fires(self):
        odd = _definition("fortnightly")

        assert not fires(date(2025, 1, 15), odd)
        assert occurrences_per_week(odd) == 0


class TestRegistry:
    def test_default_frequencies_registered(self):
        assert set(RecurrenceRegistry) >= {"once", "daily", "weekly", "biweekly", "monthly"}

    def test_get_strategy_unknown_raises(self):
        with pytest.raises(ConfigError):
            get_strategy("fortnightly")

    def test_register_strategy_rejects_non_strategies(self):
        with pytest.raises(ConfigError):
            register_strategy("yearly", object())

    def test_register_custom_strategy(self):
        class FirstOfYear:
            def fires(self, on, definition):
                return on.month == 1 and on.day == 1

            def occurrences_per_week(self, definition):
                return 1 / 52

        register_strategy("yearly", FirstOfYear())
        try:
            dues = _definition("yearly", start_date="2025-01-01", end_date="2026-12-31")
            assert fires(date(2026, 1, 1), dues)
            assert not fires(date(2026, 1, 2), dues)
        finally:
            del RecurrenceRegistry["yearly"]
