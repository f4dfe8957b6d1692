"""
Tests for the projection engine.
"""

import copy
import logging

import pandas as pd
import pytest

from cashflowlab import (
    BaseDocument,
    OneOff,
    ProjectionOverrides,
    Recurring,
    SaleWindow,
    Settings,
    compute_projection,
)
from cashflowlab.core.projection import projection_window


class TestMonthlyIncome:
    def test_six_monthly_salaries(self, salary_document):
        result = compute_projection(salary_document)

        assert result.end_balance == 6000
        assert result.total_income == 6000
        assert result.total_expenses == 0
        paydays = [row for row in result.calendar if row.income]
        assert [row.date for row in paydays] == [
            f"2025-0{m}-01" for m in range(1, 7)
        ]
        assert all(row.income == 1000 for row in paydays)

    def test_calendar_covers_window_inclusive(self, salary_document):
        result = compute_projection(salary_document)

        assert len(result.calendar) == 181
        assert result.calendar[0].date == "2025-01-01"
        assert result.calendar[-1].date == "2025-06-30"

    def test_details_carry_source_labels(self, salary_document):
        row = compute_projection(salary_document).row_for("2025-03-01")

        assert row.income_details == (("Salary", 1000.0),)


class TestMixedLedger:
    def test_totals(self, mixed_document):
        result = compute_projection(mixed_document)

        assert result.total_income == 3000
        assert result.total_expenses == pytest.approx(1475.5)
        assert result.end_balance == pytest.approx(1774.5)

    def test_lowest_and_first_negative(self, mixed_document):
        result = compute_projection(mixed_document)

        assert result.lowest_balance == -190
        assert result.lowest_balance_date == "2025-01-27"
        assert result.first_negative_date == "2025-01-27"
        assert result.negative_day_count == 5

    def test_peak(self, mixed_document):
        result = compute_projection(mixed_document)

        assert result.peak_balance == pytest.approx(1774.5)
        assert result.peak_balance_date == "2025-03-01"

    def test_expense_labels(self, mixed_document):
        result = compute_projection(mixed_document)

        assert result.row_for("2025-01-06").expense_details == (("Groceries – Food", 200.0),)
        assert result.row_for("2025-01-10").expense_details == (("Car repair", 640.0),)
        assert result.row_for("2025-02-15").expense_details == (
            ("Adjustment – Bank fee", 35.5),
        )

    def test_running_balance_identity(self, mixed_document):
        result = compute_projection(mixed_document)

        previous = mixed_document.settings.starting_balance
        for row in result.calendar:
            assert row.net == pytest.approx(row.income - row.expenses)
            assert row.running == pytest.approx(previous + row.net)
            previous = row.running

    def test_projected_weekly_income(self, mixed_document):
        result = compute_projection(mixed_document)

        # 3000 of stream income over 90 days
        assert result.projected_weekly_income == pytest.approx(233.33)

    def test_deterministic_and_pure(self, mixed_document):
        snapshot = copy.deepcopy(mixed_document)

        first = compute_projection(mixed_document)
        second = compute_projection(mixed_document)

        assert first == second
        assert mixed_document == snapshot


class TestEdgeCases:
    def test_seeded_extrema_when_balance_only_rises(self, salary_document):
        salary_document.settings.starting_balance = 100

        result = compute_projection(salary_document)

        assert result.lowest_balance == 100
        assert result.lowest_balance_date == "2025-01-01"
        assert result.first_negative_date is None
        assert result.negative_day_count == 0

    def test_invalid_start_returns_empty_result(self, caplog):
        document = BaseDocument(settings=Settings("someday", "2025-01-31", 42))

        with caplog.at_level(logging.WARNING):
            result = compute_projection(document)

        assert result.calendar == ()
        assert result.end_balance == 42
        assert "not a valid date" in caplog.text

    def test_end_before_start_collapses_to_one_day(self):
        document = BaseDocument(settings=Settings("2025-03-01", "2025-02-01"))

        assert len(compute_projection(document).calendar) == 1
        assert projection_window(document)[0] == projection_window(document)[1]

    def test_one_off_outside_window_is_ignored(self):
        document = BaseDocument(
            settings=Settings("2025-01-01", "2025-01-31"),
            entries=[OneOff(id="late", amount=99, date="2025-02-01")],
        )

        assert compute_projection(document).total_expenses == 0

    def test_unlabelled_sources_use_fallbacks(self):
        document = BaseDocument(
            settings=Settings("2025-01-01", "2025-01-01"),
            entries=[
                OneOff(id="a", amount=5, date="2025-01-01"),
                OneOff(id="b", amount=7, direction="income", date="2025-01-01"),
                Recurring(
                    id="c",
                    amount=3,
                    frequency="daily",
                    start_date="2025-01-01",
                    end_date="2025-01-31",
                ),
            ],
        )

        row = compute_projection(document).calendar[0]

        assert row.income_details == (("One-off income", 7.0),)
        assert row.expense_details == (("One-off expense", 5.0), ("Recurring expense", 3.0))

    def test_each_addition_is_rounded_half_up(self):
        document = BaseDocument(
            settings=Settings("2025-01-01", "2025-01-02"),
            entries=[
                Recurring(
                    id="tiny",
                    amount=0.005,
                    frequency="daily",
                    start_date="2025-01-01",
                    end_date="2025-01-02",
                )
            ],
        )

        result = compute_projection(document)

        assert result.total_expenses == pytest.approx(0.02)

    def test_escalator_anchors_before_window(self):
        rent = Recurring(
            id="rent",
            amount=1000,
            frequency="monthly",
            day_of_month=1,
            escalator_pct=10,
            start_date="2025-01-01",
            end_date="2025-12-31",
        )
        document = BaseDocument(
            settings=Settings("2025-03-01", "2025-03-31"), entries=[rent]
        )

        assert compute_projection(document).total_expenses == pytest.approx(1210)

    def test_malformed_definition_contributes_nothing(self):
        broken = Recurring(
            id="broken",
            amount=50,
            frequency="monthly",
            monthly_mode="nth",
            nth="sometimes",
            nth_weekday=0,
            start_date="2025-01-01",
            end_date="2025-12-31",
        )
        document = BaseDocument(
            settings=Settings("2025-01-01", "2025-12-31"), entries=[broken]
        )

        assert compute_projection(document).total_expenses == 0


class TestOverrides:
    def test_transform_hook_sees_every_recurring_amount(self, salary_document):
        seen = []

        def double(definition, amount, on):
            seen.append((definition.id, on.isoformat()))
            return amount * 2

        result = compute_projection(
            salary_document, ProjectionOverrides(transform_amount=double)
        )

        assert result.end_balance == 12000
        assert len(seen) == 6

    def test_transform_to_zero_drops_occurrence(self, salary_document):
        result = compute_projection(
            salary_document, ProjectionOverrides(transform_amount=lambda d, a, on: 0)
        )

        assert result.total_income == 0
        assert result.row_for("2025-01-01").income_details == ()

    def test_pct_sale_uses_income_before_sales(self, salary_document):
        sales = [
            SaleWindow(name="Spring", start_date="2025-02-01", uplift_pct=0.5),
            SaleWindow(name="Overlap", start_date="2025-02-01", uplift_pct=0.5),
        ]

        row = compute_projection(
            salary_document, ProjectionOverrides(sale_windows=sales)
        ).row_for("2025-02-01")

        assert row.income == 2000
        assert row.income_details == (
            ("Salary", 1000.0),
            ("Sale – Spring", 500.0),
            ("Sale – Overlap", 500.0),
        )

    def test_topup_sale_business_days_only(self, salary_document):
        sale = SaleWindow(
            start_date="2025-01-03",
            end_date="2025-01-06",
            topup=100,
            mode="topup",
            business_days_only=True,
        )

        result = compute_projection(
            salary_document, ProjectionOverrides(sale_windows=[sale])
        )

        sale_days = [
            row.date
            for row in result.calendar
            if any(label == "Sale" for label, _ in row.income_details)
        ]
        assert sale_days == ["2025-01-03", "2025-01-06"]
        assert result.end_balance == 6200

    def test_sale_on_day_without_income_adds_nothing(self, salary_document):
        sale = SaleWindow(start_date="2025-01-02", end_date="2025-01-31", uplift_pct=1.0)

        result = compute_projection(
            salary_document, ProjectionOverrides(sale_windows=[sale])
        )

        assert result.end_balance == 6000


class TestTabularViews:
    def test_to_frame(self, mixed_document):
        frame = compute_projection(mixed_document).to_frame()

        assert isinstance(frame.index, pd.DatetimeIndex)
        assert frame.index.name == "date"
        assert list(frame.columns) == ["income", "expenses", "net", "running"]
        assert len(frame) == 90
        assert frame["running"].iloc[-1] == pytest.approx(1774.5)

    def test_to_dict_is_json_ready(self, mixed_document):
        data = compute_projection(mixed_document).to_dict()

        assert data["end_balance"] == pytest.approx(1774.5)
        assert data["calendar"][5]["expense_details"] == [["Groceries – Food", 200.0]]
