"""
Context classes for CashflowLab projections.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

import numpy as np

from .currency import DEFAULT_CURRENCY, Currency, round_money
from .dates import day_range, to_ymd
from .definitions import Recurring

# (definition, amount, date) -> amount
AmountTransform = Callable[[Recurring, float, date], float]


def identity_transform(definition: Recurring, amount: float, on: date) -> float:
    return amount


@dataclass
class LedgerRow:
    """Mutable per-day accumulator used while folding sources into the ledger."""

    date: str
    income: float = 0.0
    expenses: float = 0.0
    income_details: list[tuple[str, float]] = field(default_factory=list)
    expense_details: list[tuple[str, float]] = field(default_factory=list)


@dataclass
class ProjectionContext:
    """
    Context object passed through every folding pass of a projection.

    Attributes:
        t_index: Array of daily datetime64 values covering the projection window
        rows: One mutable ledger row per day, aligned with ``t_index``
        index: YMD -> row position lookup
        currency: Currency providing rounding precision
        transform_amount: Hook applied to every recurring amount before folding
        stream_income: Transformed income contributed by income streams

    Note:
        The context is created fresh for every projection and discarded once the
        frozen result has been built.
    """

    t_index: np.ndarray
    rows: list[LedgerRow]
    index: dict[str, int]
    currency: Currency = DEFAULT_CURRENCY
    transform_amount: AmountTransform = identity_transform
    stream_income: float = 0.0

    @classmethod
    def for_window(
        cls,
        start: date,
        end: date,
        transform_amount: AmountTransform | None = None,
        currency: Currency = DEFAULT_CURRENCY,
    ) -> ProjectionContext:
        """Build a zero-initialized context with one row per day of [start, end]."""
        t_index = day_range(start, end)
        dates = [to_ymd(day.astype(object)) for day in t_index]
        return cls(
            t_index=t_index,
            rows=[LedgerRow(ymd) for ymd in dates],
            index={ymd: i for i, ymd in enumerate(dates)},
            currency=currency,
            transform_amount=transform_amount or identity_transform,
        )

    def row(self, ymd: str) -> LedgerRow | None:
        position = self.index.get(ymd)
        return None if position is None else self.rows[position]

    def add_income(self, ymd: str, label: str, amount: float) -> float:
        """Add rounded income to the row for ``ymd``; returns the amount added."""
        row = self.row(ymd)
        if row is None:
            return 0.0
        amount = round_money(amount, self.currency)
        row.income = round_money(row.income + amount, self.currency)
        row.income_details.append((label, amount))
        return amount

    def add_expense(self, ymd: str, label: str, amount: float) -> float:
        """Add rounded expense to the row for ``ymd``; returns the amount added."""
        row = self.row(ymd)
        if row is None:
            return 0.0
        amount = round_money(amount, self.currency)
        row.expenses = round_money(row.expenses + amount, self.currency)
        row.expense_details.append((label, amount))
        return amount
