"""
Projection engine for CashflowLab.

``compute_projection`` folds every money source of a base document into a
daily ledger and derives the running balance and its extrema:

1. one zeroed row per day of the settings window
2. one-off entries on their exact date, unless an override deletes or re-prices them
3. recurring income streams, then recurring entries, day by day, each amount
   resolved against the previous firing, replaced by its occurrence override
   (if any) and passed through the transform hook
4. manual adjustments (positive to income, negative to expenses)
5. sale windows, computed against each day's income before sales
6. running balance, lowest/peak balance and negative-day tracking

Every monetary figure is rounded to cents as it is added. The input document
is never mutated and the result is frozen.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import date

import pandas as pd

from .amounts import resolve_amount
from .clone import clone_document
from .context import AmountTransform, ProjectionContext
from .currency import round_money, to_finite
from .dates import iter_dates, parse_ymd, to_ymd
from .definitions import BaseDocument, OccurrenceOverride, Recurring, SaleWindow
from .kinds import SaleMode
from .recurrence import fires, window

logger = logging.getLogger(__name__)

OverrideMap = dict[tuple[str, str], OccurrenceOverride]


@dataclass
class ProjectionOverrides:
    """
    Optional hooks layered over a projection.

    Attributes:
        transform_amount: Called as ``transform_amount(definition, amount, date)``
            for every recurring occurrence; identity when None
        sale_windows: Sale windows applied after all other sources
    """

    transform_amount: AmountTransform | None = None
    sale_windows: list[SaleWindow] = field(default_factory=list)


@dataclass(frozen=True)
class CalendarRow:
    """One day of the projected ledger."""

    date: str
    income: float
    expenses: float
    net: float
    running: float
    income_details: tuple[tuple[str, float], ...] = ()
    expense_details: tuple[tuple[str, float], ...] = ()


@dataclass(frozen=True)
class ProjectionResult:
    """
    Frozen outcome of a projection.

    Attributes:
        calendar: Daily rows in ascending date order
        total_income: Sum of daily income
        total_expenses: Sum of daily expenses
        end_balance: Running balance after the last day
        lowest_balance / lowest_balance_date: Minimum running balance, seeded
            with the starting balance on the first day
        peak_balance / peak_balance_date: Maximum running balance, seeded the
            same way
        first_negative_date: First day whose running balance is below zero
        negative_day_count: Number of days with a negative running balance
        projected_weekly_income: Income-stream income per week of the window
    """

    calendar: tuple[CalendarRow, ...]
    total_income: float
    total_expenses: float
    end_balance: float
    lowest_balance: float
    lowest_balance_date: str
    peak_balance: float
    peak_balance_date: str
    first_negative_date: str | None
    negative_day_count: int
    projected_weekly_income: float

    def to_frame(self) -> pd.DataFrame:
        """
        Tabular view of the calendar.

        Returns:
            DataFrame indexed by a daily DatetimeIndex named 'date' with columns
            income, expenses, net and running
        """
        frame = pd.DataFrame(
            [
                {
                    "date": row.date,
                    "income": row.income,
                    "expenses": row.expenses,
                    "net": row.net,
                    "running": row.running,
                }
                for row in self.calendar
            ],
            columns=["date", "income", "expenses", "net", "running"],
        )
        frame["date"] = pd.to_datetime(frame["date"])
        return frame.set_index("date")

    def to_dict(self) -> dict:
        """JSON-ready dictionary of the result."""
        data = asdict(self)
        data["calendar"] = [
            {
                **asdict(row),
                "income_details": [list(pair) for pair in row.income_details],
                "expense_details": [list(pair) for pair in row.expense_details],
            }
            for row in self.calendar
        ]
        return data

    def row_for(self, ymd: str) -> CalendarRow | None:
        for row in self.calendar:
            if row.date == ymd:
                return row
        return None


def projection_window(document: BaseDocument) -> tuple[date, date] | None:
    """
    Parsed projection window; an end before the start collapses to the start.
    """
    start = parse_ymd(document.settings.start_date)
    if start is None:
        return None
    end = parse_ymd(document.settings.end_date)
    if end is None or end < start:
        end = start
    return start, end


def _override_amount(override: OccurrenceOverride | None, amount: float) -> float | None:
    """Amount after a per-occurrence override; None when the occurrence is deleted."""
    if override is None:
        return amount
    if override.deleted:
        return None
    if override.amount is None:
        return amount
    return abs(to_finite(override.amount))


def _fold_one_offs(
    ctx: ProjectionContext, document: BaseDocument, overrides: OverrideMap
) -> None:
    for entry in document.one_offs():
        amount = _override_amount(
            overrides.get((entry.id, entry.date)), abs(to_finite(entry.amount))
        )
        if not amount:
            continue
        if entry.is_income:
            ctx.add_income(entry.date, entry.describe("One-off income"), amount)
        else:
            ctx.add_expense(entry.date, entry.describe("One-off expense"), amount)


def _fold_recurring(
    ctx: ProjectionContext,
    definition: Recurring,
    overrides: OverrideMap,
    stream: bool = False,
) -> None:
    """Scan one definition across its own window and fold firings inside the ledger."""
    bounds = window(definition)
    if bounds is None or not len(ctx.rows):
        return
    first, last = bounds
    last = min(last, parse_ymd(ctx.rows[-1].date))
    fallback = "Recurring income" if definition.is_income else "Recurring expense"
    label = definition.describe("Income stream" if stream else fallback)

    previous = None
    for day in iter_dates(first, last):
        if not fires(day, definition):
            continue
        ymd = to_ymd(day)
        if ymd in ctx.index:
            amount = _override_amount(
                overrides.get((definition.id, ymd)),
                resolve_amount(definition, day, previous),
            )
            if amount is not None:
                amount = to_finite(ctx.transform_amount(definition, amount, day))
            if amount is not None and amount > 0:
                if definition.is_income:
                    added = ctx.add_income(ymd, label, amount)
                    if stream:
                        ctx.stream_income = round_money(
                            ctx.stream_income + added, ctx.currency
                        )
                else:
                    ctx.add_expense(ymd, label, amount)
        previous = day


def _fold_adjustments(ctx: ProjectionContext, document: BaseDocument) -> None:
    for adjustment in document.adjustments:
        amount = to_finite(adjustment.amount)
        if amount >= 0:
            ctx.add_income(adjustment.date, adjustment.describe(), amount)
        else:
            ctx.add_expense(adjustment.date, adjustment.describe(), -amount)


def _apply_sales(ctx: ProjectionContext, windows: Iterable[SaleWindow]) -> None:
    """Apply every sale window against the income each day had before sales."""
    windows = list(windows)
    if not windows:
        return
    base_income = [row.income for row in ctx.rows]
    for sale in windows:
        for position, row in enumerate(ctx.rows):
            if not sale.covers(row.date):
                continue
            if sale.business_days_only and parse_ymd(row.date).weekday() >= 5:
                continue
            if sale.mode == SaleMode.TOPUP:
                amount = to_finite(sale.topup)
            else:
                pct = to_finite(sale.uplift_pct)
                amount = base_income[position] * pct if pct > 0 else 0.0
            if amount > 0:
                ctx.add_income(row.date, sale.describe(), amount)


def _finalize(
    ctx: ProjectionContext, starting_balance: float
) -> ProjectionResult:
    """Second pass: running balance, extrema and negative-day tracking."""
    currency = ctx.currency
    running = round_money(starting_balance, currency)
    start_ymd = ctx.rows[0].date
    lowest, lowest_date = running, start_ymd
    peak, peak_date = running, start_ymd
    first_negative = None
    negative_days = 0
    total_income = 0.0
    total_expenses = 0.0

    calendar = []
    for row in ctx.rows:
        net = round_money(row.income - row.expenses, currency)
        running = round_money(running + net, currency)
        total_income = round_money(total_income + row.income, currency)
        total_expenses = round_money(total_expenses + row.expenses, currency)
        if running < lowest:
            lowest, lowest_date = running, row.date
        if running > peak:
            peak, peak_date = running, row.date
        if running < 0:
            negative_days += 1
            if first_negative is None:
                first_negative = row.date
        calendar.append(
            CalendarRow(
                date=row.date,
                income=row.income,
                expenses=row.expenses,
                net=net,
                running=running,
                income_details=tuple(row.income_details),
                expense_details=tuple(row.expense_details),
            )
        )

    weeks = len(calendar) / 7
    weekly = round_money(ctx.stream_income / weeks, currency) if weeks else 0.0
    return ProjectionResult(
        calendar=tuple(calendar),
        total_income=total_income,
        total_expenses=total_expenses,
        end_balance=running,
        lowest_balance=lowest,
        lowest_balance_date=lowest_date,
        peak_balance=peak,
        peak_balance_date=peak_date,
        first_negative_date=first_negative,
        negative_day_count=negative_days,
        projected_weekly_income=weekly,
    )


def empty_result(starting_balance: float = 0.0, start: str = "") -> ProjectionResult:
    """Result of a projection with no usable window."""
    balance = round_money(starting_balance)
    return ProjectionResult(
        calendar=(),
        total_income=0.0,
        total_expenses=0.0,
        end_balance=balance,
        lowest_balance=balance,
        lowest_balance_date=start,
        peak_balance=balance,
        peak_balance_date=start,
        first_negative_date=None,
        negative_day_count=0,
        projected_weekly_income=0.0,
    )


def compute_projection(
    document: BaseDocument, overrides: ProjectionOverrides | None = None
) -> ProjectionResult:
    """
    Project the daily ledger of a base document.

    Args:
        document: Base document to project (not mutated)
        overrides: Optional amount transform and sale windows

    Returns:
        Frozen ProjectionResult

    Example:
        ```python
        from cashflowlab import BaseDocument, Recurring, Settings, compute_projection

        salary = Recurring(
            name="Salary", amount=1000, direction="income", frequency="monthly",
            start_date="2025-01-01", end_date="2025-06-30", day_of_month=1,
        )
        doc = BaseDocument(
            settings=Settings("2025-01-01", "2025-06-30"), income_streams=[salary]
        )
        compute_projection(doc).end_balance  # 6000.0
        ```
    """
    document = clone_document(document)
    overrides = overrides or ProjectionOverrides()
    starting_balance = to_finite(document.settings.starting_balance)

    bounds = projection_window(document)
    if bounds is None:
        logger.warning(
            "Projection start date '%s' is not a valid date; nothing to project",
            document.settings.start_date,
        )
        return empty_result(starting_balance)

    ctx = ProjectionContext.for_window(*bounds, transform_amount=overrides.transform_amount)
    override_map = document.override_map()
    _fold_one_offs(ctx, document, override_map)
    for stream in document.income_streams:
        _fold_recurring(ctx, stream, override_map, stream=True)
    for definition in document.recurring_entries():
        _fold_recurring(ctx, definition, override_map)
    _fold_adjustments(ctx, document)
    _apply_sales(ctx, overrides.sale_windows)
    return _finalize(ctx, starting_balance)
