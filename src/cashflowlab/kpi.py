"""
KPI calculation utilities for cash-flow projections.

This module provides standalone functions for computing key performance indicators
from the daily ledger frame returned by ``ProjectionResult.to_frame()`` (a
DatetimeIndex with income, expenses, net and running columns). All functions
return pandas Series, DataFrames or scalars.
"""

from __future__ import annotations

import numpy as np
import pandas as pd


def monthly_summary(df: pd.DataFrame) -> pd.DataFrame:
    """
    Aggregate a daily ledger into calendar months.

    Args:
        df: Daily ledger frame

    Returns:
        DataFrame indexed by month period with summed income, expenses and net
        and the month-end running balance
    """
    if df.empty:
        return pd.DataFrame(columns=["income", "expenses", "net", "running"])
    grouped = df.groupby(df.index.to_period("M"))
    summary = grouped[["income", "expenses", "net"]].sum()
    summary["running"] = grouped["running"].last()
    return summary.round(2)


def weekly_totals(df: pd.DataFrame, weekday: str = "SUN") -> pd.DataFrame:
    """
    Sum income, expenses and net per week.

    Args:
        df: Daily ledger frame
        weekday: Week-ending day understood by pandas ('SUN', 'SAT', ...)

    Returns:
        DataFrame indexed by week-ending date
    """
    return df[["income", "expenses", "net"]].resample(f"W-{weekday}").sum().round(2)


def liquidity_runway(
    df: pd.DataFrame,
    lookback_days: int = 30,
    running_col: str = "running",
    expenses_col: str = "expenses",
) -> pd.Series:
    """
    Calculate liquidity runway in days.

    Liquidity runway = running balance / rolling_average(daily expenses, lookback_days)

    Args:
        df: Daily ledger frame
        lookback_days: Number of days to average expenses over
        running_col: Column name for the running balance
        expenses_col: Column name for expenses

    Returns:
        Series with runway in days per row (inf without expenses, 0 when the
        balance is already negative)
    """
    balance = df[running_col]
    avg_expenses = df[expenses_col].rolling(window=lookback_days, min_periods=1).mean()

    runway = np.where(
        avg_expenses > 0,
        np.maximum(balance, 0) / avg_expenses.where(avg_expenses > 0, 1.0),
        np.inf,
    )
    return pd.Series(runway, index=df.index, name="liquidity_runway_days")


def max_drawdown(series: pd.Series) -> float:
    """
    Largest peak-to-trough fall of a balance series, in currency units.

    Balances can cross zero, so the drawdown is absolute rather than relative.
    Returns 0.0 for an empty or never-falling series.
    """
    if series.empty:
        return 0.0
    drawdown = series - series.cummax()
    return float(round(-drawdown.min(), 2)) or 0.0


def savings_rate(
    df: pd.DataFrame,
    income_col: str = "income",
    expenses_col: str = "expenses",
) -> pd.Series:
    """
    Calculate savings rate per row.

    Savings rate = (income - expenses) / income

    Returns:
        Series with savings rate (NaN where income <= 0)
    """
    income = df[income_col]
    net_income = income - df[expenses_col]

    rate = np.where(income > 0, net_income / income.where(income > 0, 1.0), np.nan)
    return pd.Series(rate, index=df.index, name="savings_rate")


def balance_delta(baseline_df: pd.DataFrame, scenario_df: pd.DataFrame) -> pd.DataFrame:
    """
    Align two ledgers and compute the scenario's running-balance advantage.

    Returns:
        DataFrame with baseline, scenario and delta columns over the common dates
    """
    merged = pd.concat(
        [baseline_df["running"].rename("baseline"), scenario_df["running"].rename("scenario")],
        axis=1,
        join="inner",
    )
    merged["delta"] = (merged["scenario"] - merged["baseline"]).round(2)
    return merged


def breakeven_date(
    scenario_df: pd.DataFrame, baseline_df: pd.DataFrame
) -> pd.Timestamp | None:
    """
    First date on which the scenario balance matches or exceeds the baseline.

    Returns:
        Timestamp of the first such date, or None if it never happens
    """
    merged = balance_delta(baseline_df, scenario_df)
    if merged.empty:
        return None

    breakeven_mask = merged["delta"] >= 0
    if not breakeven_mask.any():
        return None
    return merged.index[np.where(breakeven_mask)[0][0]]
