"""
Chart functions for visualizing cash-flow projections.

This module provides chart functions at two levels:
- Projection level: daily balance and monthly cash-flow of one projection
- What-if level: baseline versus scenario comparisons

All chart functions return (figure, tidy_dataframe_used) for consistency.
"""

from __future__ import annotations

import pandas as pd

from .core.projection import ProjectionResult
from .core.whatif import WhatIfEvaluation
from .kpi import balance_delta, monthly_summary

# Plotly imports with graceful fallback
try:
    import plotly.express as px
    import plotly.graph_objects as go

    PLOTLY_AVAILABLE = True
except ImportError:
    PLOTLY_AVAILABLE = False


def _check_plotly() -> None:
    """Check if Plotly is available and raise helpful error if not."""
    if not PLOTLY_AVAILABLE:
        raise ImportError(
            "Plotly is required for chart functions. Install with:\n"
            "pip install plotly kaleido\n"
            "or\n"
            "pip install cashflowlab[viz]"
        )


def _frame(result: ProjectionResult | pd.DataFrame) -> pd.DataFrame:
    return result.to_frame() if isinstance(result, ProjectionResult) else result


# =============================================================================
# Projection-level charts
# =============================================================================


def balance_over_time(
    result: ProjectionResult | pd.DataFrame,
) -> tuple[go.Figure, pd.DataFrame]:
    """
    Plot the daily running balance with a zero reference line.

    **Args:**
        result: ProjectionResult or its ``to_frame()`` DataFrame

    **Returns:**
        Tuple of (plotly_figure, tidy_dataframe_used)

    **Example:**
        ```python
        from cashflowlab import compute_projection, load_document
        from cashflowlab.charts import balance_over_time

        fig, data = balance_over_time(compute_projection(load_document("plan.yaml")))
        fig.show()
        ```
    """
    _check_plotly()

    tidy = _frame(result).reset_index()
    fig = px.line(
        tidy,
        x="date",
        y="running",
        title="Projected Balance",
        labels={"running": "Balance", "date": "Date"},
    )
    fig.add_hline(y=0, line_dash="dash", line_color="gray", opacity=0.5)
    fig.update_layout(hovermode="x unified")

    return fig, tidy


def monthly_cashflow_bars(
    result: ProjectionResult | pd.DataFrame,
) -> tuple[go.Figure, pd.DataFrame]:
    """
    Grouped bars of monthly income and expenses with the net as a line.

    Returns:
        Tuple of (plotly_figure, monthly_dataframe_used)
    """
    _check_plotly()

    monthly = monthly_summary(_frame(result))
    tidy = monthly.reset_index()
    tidy["date"] = tidy["date"].dt.to_timestamp()

    fig = go.Figure()
    fig.add_bar(x=tidy["date"], y=tidy["income"], name="Income")
    fig.add_bar(x=tidy["date"], y=-tidy["expenses"], name="Expenses")
    fig.add_scatter(x=tidy["date"], y=tidy["net"], name="Net", mode="lines+markers")
    fig.update_layout(
        title="Monthly Cash Flow",
        barmode="relative",
        hovermode="x unified",
        legend_title="Type",
        yaxis_title="Amount",
    )

    return fig, tidy


# =============================================================================
# What-if charts
# =============================================================================


def whatif_balance_comparison(
    evaluation: WhatIfEvaluation,
) -> tuple[go.Figure, pd.DataFrame]:
    """
    Overlay the baseline and scenario balances of a what-if evaluation.

    Returns:
        Tuple of (plotly_figure, tidy_dataframe_used) where the tidy frame has
        date, projection and running columns
    """
    _check_plotly()

    merged = balance_delta(evaluation.baseline.to_frame(), evaluation.scenario.to_frame())
    tidy = (
        merged[["baseline", "scenario"]]
        .reset_index()
        .melt(id_vars="date", var_name="projection", value_name="running")
    )
    fig = px.line(
        tidy,
        x="date",
        y="running",
        color="projection",
        title="What-If Balance Comparison",
        labels={"running": "Balance", "date": "Date"},
    )
    fig.add_hline(y=0, line_dash="dash", line_color="gray", opacity=0.5)
    fig.update_layout(hovermode="x unified", legend_title="Projection")

    return fig, tidy


# =============================================================================
# Utility functions
# =============================================================================


def save_chart(fig: go.Figure, filename: str, format: str = "html") -> None:
    """
    Save chart to file.

    Args:
        fig: Plotly figure
        filename: Output filename
        format: Output format ('html', 'png', 'pdf', 'svg')
    """
    _check_plotly()

    if format == "html":
        fig.write_html(filename)
    elif format in ("png", "pdf", "svg"):
        fig.write_image(filename, format=format)
    else:
        raise ValueError(f"Unsupported format: {format}")
