"""
Shared fixtures for CashflowLab tests.
"""

import pytest

from cashflowlab import (
    Adjustment,
    BaseDocument,
    OneOff,
    Recurring,
    Settings,
)


@pytest.fixture
def salary() -> Recurring:
    """1000 on the 1st of every month, January to June 2025."""
    return Recurring(
        id="salary",
        name="Salary",
        amount=1000,
        direction="income",
        frequency="monthly",
        day_of_month=1,
        start_date="2025-01-01",
        end_date="2025-06-30",
    )


@pytest.fixture
def groceries() -> Recurring:
    """200 every Monday of January 2025 (four firings)."""
    return Recurring(
        id="groceries",
        name="Groceries",
        category="Food",
        amount=200,
        direction="expense",
        frequency="weekly",
        weekdays=(0,),
        start_date="2025-01-06",
        end_date="2025-01-27",
    )


@pytest.fixture
def salary_document(salary) -> BaseDocument:
    return BaseDocument(
        settings=Settings("2025-01-01", "2025-06-30"),
        income_streams=[salary],
    )


@pytest.fixture
def mixed_document(salary, groceries) -> BaseDocument:
    """Salary, weekly groceries, a one-off repair and a bank-fee adjustment."""
    return BaseDocument(
        settings=Settings("2025-01-01", "2025-03-31", starting_balance=250),
        adjustments=[Adjustment("2025-02-15", -35.5, "Bank fee")],
        entries=[
            OneOff(
                id="repair",
                name="Car repair",
                amount=640,
                direction="expense",
                date="2025-01-10",
            ),
            groceries,
        ],
        income_streams=[salary],
    )


@pytest.fixture
def raw_document() -> dict:
    """camelCase mapping as read from YAML/JSON."""
    return {
        "settings": {
            "startDate": "2025-01-01",
            "endDate": "2025-03-31",
            "startingBalance": 500,
        },
        "incomeStreams": [
            {
                "id": "salary",
                "name": "Salary",
                "amount": 2500,
                "frequency": "monthly",
                "dayOfMonth": 25,
                "startDate": "2025-01-01",
                "endDate": "2025-12-31",
            },
            {
                "id": "market",
                "name": "Market stall",
                "amount": "150.00",
                "frequency": "weekly",
                "weekdays": ["sat"],
                "startDate": "2025-01-01",
                "endDate": "2025-12-31",
            },
        ],
        "oneOffEntries": [
            {
                "id": "rent",
                "name": "Rent",
                "type": "expense",
                "amount": 1200,
                "recurring": True,
                "frequency": "monthly",
                "dayOfMonth": 1,
                "startDate": "2025-01-01",
                "endDate": "2025-12-31",
            },
            {
                "id": "refund",
                "name": "Tax refund",
                "type": "income",
                "amount": 820,
                "date": "2025-02-14",
            },
        ],
        "adjustments": [{"date": "2025-03-01", "amount": -20, "note": "Bank fee"}],
    }
