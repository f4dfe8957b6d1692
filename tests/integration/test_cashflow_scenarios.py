"""
End-to-end scenarios exercising the public API together.

Covers recurrence edge cases, escalation, determinism, balance identities and
the what-if overlay through loading, projecting and comparing documents.
"""

from datetime import date

import pytest

from cashflowlab import (
    BaseDocument,
    GlobalTweak,
    Recurring,
    Sandbox,
    Settings,
    Tweaks,
    compute_projection,
    evaluate_scenario,
    iter_occurrences,
    load_sandbox,
)
from cashflowlab.cli import EXAMPLE_SANDBOX


class TestEndToEndScenarios:
    def test_day_31_lands_on_end_of_february(self):
        rent = Recurring(
            id="rent",
            amount=900,
            frequency="monthly",
            day_of_month=31,
            start_date="2024-01-01",
            end_date="2025-03-31",
        )

        dates = [o.date for o in iter_occurrences(rent)]

        assert date(2024, 2, 29) in dates
        assert date(2025, 2, 28) in dates
        assert date(2025, 3, 1) not in dates

    def test_biweekly_wednesday(self):
        cleaning = Recurring(
            id="cleaning",
            amount=60,
            frequency="biweekly",
            weekdays=(2,),
            start_date="2025-01-01",
            end_date="2025-01-31",
        )

        dates = [o.date for o in iter_occurrences(cleaning)]

        assert dates == [date(2025, 1, 1), date(2025, 1, 15), date(2025, 1, 29)]

    def test_escalator_after_two_months(self):
        rent = Recurring(
            id="rent",
            amount=1000,
            frequency="monthly",
            day_of_month=1,
            escalator_pct=10,
            start_date="2025-01-01",
            end_date="2025-03-31",
        )

        amounts = [o.amount for o in iter_occurrences(rent)]

        assert amounts == pytest.approx([1000, 1100, 1210])

    def test_example_sandbox_round_trip(self):
        sandbox = load_sandbox(EXAMPLE_SANDBOX, strict=True)

        first = evaluate_scenario(sandbox)
        second = evaluate_scenario(sandbox)

        assert first == second
        # Spring sale adds 40 on five business days
        assert first.scenario.row_for("2025-04-01").income_details[-1] == (
            "Sale – Spring sale",
            40.0,
        )
        assert first.comparison.total_income > 0

    def test_example_sandbox_identities(self):
        evaluation = evaluate_scenario(load_sandbox(EXAMPLE_SANDBOX))

        for result in (evaluation.baseline, evaluation.scenario):
            running = 2500.0
            negatives = 0
            for row in result.calendar:
                running = round(running + row.net, 2)
                assert row.running == pytest.approx(running)
                negatives += row.running < 0
            assert result.negative_day_count == negatives
            assert (result.first_negative_date is None) == (negatives == 0)

    def test_six_months_of_salary(self, salary_document):
        result = compute_projection(salary_document)

        assert result.end_balance == 6000
        assert sum(1 for row in result.calendar if row.income == 1000) == 6

    def test_global_ten_percent_on_monday_expense(self, groceries):
        document = BaseDocument(
            settings=Settings("2025-01-01", "2025-01-31"), entries=[groceries]
        )
        sandbox = Sandbox(base=document, tweaks=Tweaks(global_tweak=GlobalTweak(pct=0.1)))

        evaluation = evaluate_scenario(sandbox)

        assert evaluation.baseline.total_expenses == 800
        assert evaluation.scenario.total_expenses == pytest.approx(880)
        assert evaluation.scenario.total_expenses == pytest.approx(
            evaluation.baseline.total_expenses * 1.1
        )
