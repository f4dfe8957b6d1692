"""Tests for occurrence scanning, next occurrence and upcoming lists."""

from datetime import date

import pytest

from cashflowlab.core.definitions import OneOff, Recurring
from cashflowlab.core.scanner import (
    Occurrence,
    iter_occurrences,
    next_occurrence,
    upcoming,
)


def _monthly_rent(**fields) -> Recurring:
    defaults = dict(
        id="rent",
        name="Rent",
        amount=1000,
        frequency="monthly",
        day_of_month=1,
        start_date="2025-01-01",
        end_date="2025-12-31",
    )
    defaults.update(fields)
    return Recurring(**defaults)


class TestIterOccurrences:
    def test_yields_every_firing_in_window(self):
        rent = _monthly_rent(end_date="2025-04-30")

        found = list(iter_occurrences(rent))

        assert [o.date for o in found] == [date(2025, m, 1) for m in range(1, 5)]
        assert all(o.amount == 1000 for o in found)

    def test_range_is_clipped(self):
        rent = _monthly_rent()

        found = list(iter_occurrences(rent, "2025-03-01", "2025-05-31"))

        assert [o.date for o in found] == [date(2025, 3, 1), date(2025, 4, 1), date(2025, 5, 1)]

    def test_escalator_stays_anchored_before_range(self):
        rent = _monthly_rent(escalator_pct=10)

        first = next(iter_occurrences(rent, start="2025-03-01"))

        # Compounded once per elapsed month since the January firing
        assert first.date == date(2025, 3, 1)
        assert first.amount == pytest.approx(1000 * 1.1**2)

    def test_malformed_window_yields_nothing(self):
        assert list(iter_occurrences(_monthly_rent(start_date="bad"))) == []


class TestNextOccurrence:
    def test_recurring_first_on_or_after(self):
        rent = _monthly_rent()

        assert next_occurrence(rent, "2025-02-02") == Occurrence(date(2025, 3, 1), 1000)
        assert next_occurrence(rent, "2025-03-01") == Occurrence(date(2025, 3, 1), 1000)

    def test_none_after_window(self):
        assert next_occurrence(_monthly_rent(), "2026-01-01") is None

    def test_zero_amount_is_none(self):
        assert next_occurrence(_monthly_rent(amount=0), "2025-01-01") is None

    def test_one_off(self):
        repair = OneOff(id="repair", amount=-640, date="2025-02-03")

        assert next_occurrence(repair, "2025-02-01") == Occurrence(date(2025, 2, 3), 640)
        assert next_occurrence(repair, "2025-02-04") is None

    def test_invalid_from_date(self):
        assert next_occurrence(_monthly_rent(), "someday") is None

    def test_defaults_to_today(self):
        always = Recurring(
            id="coffee",
            amount=3,
            frequency="daily",
            start_date="2020-01-01",
            end_date="2999-12-31",
        )

        assert next_occurrence(always).date == date.today()


def test_upcoming_sorts_across_entries():
    rent = _monthly_rent()
    gym = Recurring(
        id="gym",
        amount=15,
        frequency="weekly",
        weekdays=(0,),
        start_date="2025-01-01",
        end_date="2025-12-31",
    )
    refund = OneOff(id="refund", amount=820, direction="income", date="2025-02-14")

    found = upcoming([rent, gym, refund], "2025-02-01", days=14)

    assert [(entry.id, o.date) for entry, o in found] == [
        ("rent", date(2025, 2, 1)),
        ("gym", date(2025, 2, 3)),
        ("gym", date(2025, 2, 10)),
        ("refund", date(2025, 2, 14)),
    ]


def test_upcoming_window_is_half_open():
    refund = OneOff(id="refund", amount=820, date="2025-02-15")

    assert upcoming([refund], "2025-02-01", days=14) == []
    assert upcoming([refund], "2025-02-01", days=0) == []
