from __future__ import annotations

from datetime import date, timedelta

import cashflowlab.strategies  # noqa: F401 - ensure registries are wired
from cashflowlab.core.definitions import Recurring
from cashflowlab.core.recurrence import fires, occurrences_per_week
from cashflowlab.strategies.recurrence.monthly import (
    MONTHLY_PER_WEEK,
    RecurrenceMonthly,
    nth_weekday_of_month,
)


def _monthly(**fields) -> Recurring:
    defaults = dict(
        id="rent",
        name="Rent",
        amount=1000,
        frequency="monthly",
        start_date="2024-01-01",
        end_date="2025-12-31",
    )
    defaults.update(fields)
    return Recurring(**defaults)


def _firing_dates(definition: Recurring, start: date, end: date) -> list[date]:
    days = (end - start).days + 1
    return [
        start + timedelta(days=i)
        for i in range(days)
        if fires(start + timedelta(days=i), definition)
    ]


class TestMonthlyByDay:
    def test_day_31_clamps_to_end_of_february(self):
        rent = _monthly(day_of_month=31)

        assert fires(date(2025, 2, 28), rent)
        assert not fires(date(2025, 3, 1), rent)
        assert fires(date(2024, 2, 29), rent)
        assert not fires(date(2024, 2, 28), rent)

    def test_day_31_fires_on_30_in_short_months(self):
        rent = _monthly(day_of_month=31)

        assert fires(date(2025, 4, 30), rent)
        assert fires(date(2025, 1, 31), rent)
        assert not fires(date(2025, 1, 30), rent)

    def test_fires_once_per_month(self):
        rent = _monthly(day_of_month=15)

        found = _firing_dates(rent, date(2025, 1, 1), date(2025, 6, 30))

        assert found == [date(2025, m, 15) for m in range(1, 7)]

    def test_missing_day_of_month_never_fires(self):
        rent = _monthly(day_of_month=None)

        assert _firing_dates(rent, date(2025, 1, 1), date(2025, 3, 31)) == []

    def test_malformed_day_of_month_never_fires(self):
        rent = _monthly(day_of_month="first")

        assert not fires(date(2025, 1, 1), rent)


class TestMonthlyByNthWeekday:
    def test_second_tuesday(self):
        meeting = _monthly(monthly_mode="nth", nth=2, nth_weekday=1)

        found = _firing_dates(meeting, date(2025, 1, 1), date(2025, 3, 31))

        assert found == [date(2025, 1, 14), date(2025, 2, 11), date(2025, 3, 11)]

    def test_last_friday(self):
        payroll = _monthly(monthly_mode="nth", nth="last", nth_weekday=4)

        found = _firing_dates(payroll, date(2025, 1, 1), date(2025, 2, 28))

        assert found == [date(2025, 1, 31), date(2025, 2, 28)]

    def test_fifth_occurrence_skips_short_months(self):
        # January 2025 has five Fridays, February only four
        fifth_friday = _monthly(monthly_mode="nth", nth=5, nth_weekday=4)

        found = _firing_dates(fifth_friday, date(2025, 1, 1), date(2025, 2, 28))

        assert found == [date(2025, 1, 31)]

    def test_string_ordinal_and_weekday_name(self):
        meeting = _monthly(monthly_mode="nth", nth="1", nth_weekday="monday")

        assert fires(date(2025, 1, 6), meeting)
        assert not fires(date(2025, 1, 13), meeting)

    def test_invalid_ordinal_never_fires(self):
        for nth in (0, 6, "second", None, 1.5):
            definition = _monthly(monthly_mode="nth", nth=nth, nth_weekday=0)
            assert _firing_dates(definition, date(2025, 1, 1), date(2025, 2, 28)) == []

    def test_missing_weekday_never_fires(self):
        definition = _monthly(monthly_mode="nth", nth=1, nth_weekday=None)

        assert _firing_dates(definition, date(2025, 1, 1), date(2025, 1, 31)) == []


def test_nth_weekday_of_month_helper():
    assert nth_weekday_of_month(2025, 3, 0, 1) == date(2025, 3, 3)
    assert nth_weekday_of_month(2025, 3, 0, "last") == date(2025, 3, 31)
    assert nth_weekday_of_month(2025, 2, 0, 5) is None


def test_occurrences_per_week_is_twelve_over_fifty_two():
    rent = _monthly(day_of_month=1)

    assert RecurrenceMonthly().occurrences_per_week(rent) == MONTHLY_PER_WEEK
    assert occurrences_per_week(rent) == 12 / 52
