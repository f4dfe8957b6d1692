"""
CashflowLab - Recurrence-Aware Cash-Flow Projection

CashflowLab projects a day-by-day balance from recurring and one-time money
movements and lets you explore speculative "what-if" edits without touching
the underlying plan.

Key Features:
- **Strategy Pattern**: Recurrence rules are selected by a 'frequency'
  discriminator and registered in a registry, not hard-coded
- **Explicit Data Model**: One-off and recurring entries are separate classes
  with an automatic 'family' discriminator
- **Deterministic**: Projections are pure functions of their input document
- **What-If Overlay**: Percent, delta, absolute and weekly-target tweaks plus
  sale windows, compared against the untouched baseline
- **Scenario Changes**: Add, remove or modify entries and scale income or
  expenses, from hand-written changes or predefined templates
- **Occurrence Overrides**: Edit or delete one occurrence of a series
- **Rich Outputs**: pandas ledger frames, KPI helpers and Plotly charts

Architecture Overview:
- **Recurring / OneOff**: Money movements (tagged union)
- **RecurrenceRegistry**: Maps frequency strings to recurrence strategies
- **compute_projection**: Folds every source into a daily ledger
- **Sandbox / evaluate_scenario**: What-if tweaks and baseline comparison
- **load_document / load_sandbox**: YAML/JSON loading with validation

Quick Start:
    ```python
    from cashflowlab import BaseDocument, Recurring, Settings, compute_projection

    salary = Recurring(
        id="salary", name="Salary", amount=1000, direction="income",
        frequency="monthly", day_of_month=1,
        start_date="2025-01-01", end_date="2025-06-30",
    )
    doc = BaseDocument(
        settings=Settings("2025-01-01", "2025-06-30"), income_streams=[salary]
    )
    result = compute_projection(doc)
    print(result.end_balance)  # 6000.0
    ```

Available Frequencies:
    - 'once': Single occurrence on on_date
    - 'daily': Every day, optionally skipping weekends
    - 'weekly': Selected weekdays
    - 'biweekly': Selected weekdays every other week
    - 'monthly': Day of month (clamped to month length) or nth weekday

Extending the System:
    To add a new frequency, create a class implementing IRecurrenceStrategy
    and register it with ``register_strategy('<frequency>', Strategy())``.
"""

# Version information
__version__ = "0.1.0"
__description__ = "Recurrence-aware cash-flow projection with what-if overlays"

# Registers the default recurrence strategies
import cashflowlab.strategies

from .core import (
    Adjustment,
    BaseDocument,
    CalendarRow,
    ConfigError,
    DocumentValidationError,
    GlobalTweak,
    IRecurrenceStrategy,
    LoaderError,
    OccurrenceOverride,
    OneOff,
    Occurrence,
    ProjectionOverrides,
    ProjectionResult,
    Recurring,
    RecurrenceRegistry,
    SaleConfig,
    SaleWindow,
    Sandbox,
    ScenarioChange,
    Settings,
    Step,
    Tweak,
    Tweaks,
    ValidationReport,
    apply_changes,
    compare_projections,
    compute_projection,
    day_range,
    delete_occurrence,
    effective_amount,
    evaluate_scenario,
    expand_occurrences,
    fires,
    iter_occurrences,
    kinds,
    load_document,
    load_sandbox,
    lock_stream,
    next_occurrence,
    override_occurrence,
    reconcile_tweaks,
    reset_stream,
    resolve_amount,
    revert_occurrence,
    scenario_template,
    set_effective,
    set_percent,
    set_weekly_target,
    unlock_stream,
    upcoming,
    validate_document,
    validate_sandbox,
)

# Import KPI utilities
from .kpi import (
    balance_delta,
    breakeven_date,
    liquidity_runway,
    max_drawdown,
    monthly_summary,
    savings_rate,
    weekly_totals,
)
from .strategies import register_strategy

# Define what gets imported with "from cashflowlab import *"
__all__ = [
    # Data model
    "Adjustment",
    "BaseDocument",
    "OccurrenceOverride",
    "OneOff",
    "Recurring",
    "SaleWindow",
    "Settings",
    "Step",
    # Errors
    "ConfigError",
    "DocumentValidationError",
    "LoaderError",
    # Recurrence
    "IRecurrenceStrategy",
    "RecurrenceRegistry",
    "register_strategy",
    "fires",
    "kinds",
    # Scanning and projection
    "Occurrence",
    "iter_occurrences",
    "next_occurrence",
    "upcoming",
    "resolve_amount",
    "day_range",
    "CalendarRow",
    "ProjectionOverrides",
    "ProjectionResult",
    "compute_projection",
    "expand_occurrences",
    "override_occurrence",
    "delete_occurrence",
    "revert_occurrence",
    # What-if
    "GlobalTweak",
    "Tweak",
    "Tweaks",
    "SaleConfig",
    "Sandbox",
    "compare_projections",
    "effective_amount",
    "evaluate_scenario",
    "lock_stream",
    "unlock_stream",
    "reset_stream",
    "reconcile_tweaks",
    "set_effective",
    "set_percent",
    "set_weekly_target",
    "ScenarioChange",
    "apply_changes",
    "scenario_template",
    # Loading and validation
    "ValidationReport",
    "load_document",
    "load_sandbox",
    "validate_document",
    "validate_sandbox",
    # KPI utilities
    "balance_delta",
    "breakeven_date",
    "liquidity_runway",
    "max_drawdown",
    "monthly_summary",
    "savings_rate",
    "weekly_totals",
    # Version
    "__version__",
]
