"""
Core module for CashflowLab.

This module contains the building blocks of the projection engine: dates and
money helpers, the entry data model, recurrence matching, amount resolution,
occurrence scanning, per-occurrence overrides, the projection engine, structured
scenario changes and the what-if overlay.
"""

from . import kinds
from .amounts import base_amount_for_date, resolve_amount
from .changes import ScenarioChange, apply_changes, change_problems, scenario_template
from .context import ProjectionContext
from .currency import clamp_currency, clamp_percent, parse_money, round_money
from .dates import (
    add_days,
    compare_ymd,
    day_range,
    days_in_month,
    is_valid_ymd,
    is_weekend,
    months_between,
    next_business_day,
    parse_excel_or_iso_date,
    parse_ymd,
    roll_weekend,
    subtract_days,
    to_ymd,
)
from .definitions import (
    Adjustment,
    AnyEntry,
    BaseDocument,
    OccurrenceOverride,
    OneOff,
    Recurring,
    SaleWindow,
    Settings,
    Step,
)
from .document_loader import load_document, load_sandbox
from .errors import ConfigError, DocumentValidationError, LoaderError
from .interfaces import IRecurrenceStrategy
from .overrides import (
    OccurrenceRecord,
    delete_occurrence,
    expand_occurrences,
    override_occurrence,
    revert_occurrence,
)
from .projection import (
    CalendarRow,
    ProjectionOverrides,
    ProjectionResult,
    compute_projection,
)
from .recurrence import RecurrenceRegistry, fires, get_strategy, occurrences_per_week
from .scanner import Occurrence, iter_occurrences, next_occurrence, upcoming
from .validation import (
    SandboxReport,
    ValidationIssue,
    ValidationReport,
    validate_document,
    validate_sandbox,
)
from .whatif import (
    GlobalTweak,
    ProjectionComparison,
    Sandbox,
    SaleConfig,
    Tweak,
    Tweaks,
    WhatIfEvaluation,
    add_change,
    build_overrides,
    clear_changes,
    compare_projections,
    effective_amount,
    evaluate_scenario,
    lock_stream,
    percent_for_effective,
    reconcile_tweaks,
    reset_stream,
    set_effective,
    set_global,
    set_percent,
    set_weekly_target,
    unlock_stream,
)

__all__ = [
    # Errors
    "ConfigError",
    "DocumentValidationError",
    "LoaderError",
    # Kinds
    "kinds",
    # Dates and money
    "add_days",
    "compare_ymd",
    "day_range",
    "days_in_month",
    "is_valid_ymd",
    "is_weekend",
    "months_between",
    "next_business_day",
    "parse_excel_or_iso_date",
    "parse_ymd",
    "roll_weekend",
    "subtract_days",
    "to_ymd",
    "clamp_currency",
    "clamp_percent",
    "parse_money",
    "round_money",
    # Data model
    "Adjustment",
    "AnyEntry",
    "BaseDocument",
    "OccurrenceOverride",
    "OneOff",
    "Recurring",
    "SaleWindow",
    "Settings",
    "Step",
    # Recurrence
    "IRecurrenceStrategy",
    "RecurrenceRegistry",
    "fires",
    "get_strategy",
    "occurrences_per_week",
    # Amounts and scanning
    "base_amount_for_date",
    "resolve_amount",
    "Occurrence",
    "iter_occurrences",
    "next_occurrence",
    "upcoming",
    # Projection
    "ProjectionContext",
    "ProjectionOverrides",
    "CalendarRow",
    "ProjectionResult",
    "compute_projection",
    # Occurrence overrides
    "OccurrenceRecord",
    "delete_occurrence",
    "expand_occurrences",
    "override_occurrence",
    "revert_occurrence",
    # Scenario changes
    "ScenarioChange",
    "apply_changes",
    "change_problems",
    "scenario_template",
    # What-if
    "GlobalTweak",
    "Tweak",
    "Tweaks",
    "SaleConfig",
    "Sandbox",
    "ProjectionComparison",
    "WhatIfEvaluation",
    "add_change",
    "build_overrides",
    "clear_changes",
    "compare_projections",
    "effective_amount",
    "evaluate_scenario",
    "lock_stream",
    "unlock_stream",
    "reset_stream",
    "set_effective",
    "set_global",
    "set_percent",
    "set_weekly_target",
    "percent_for_effective",
    "reconcile_tweaks",
    # Validation and loading
    "ValidationIssue",
    "ValidationReport",
    "SandboxReport",
    "validate_document",
    "validate_sandbox",
    "load_document",
    "load_sandbox",
]
