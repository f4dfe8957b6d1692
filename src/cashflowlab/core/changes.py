"""
Structured scenario changes for CashflowLab.

A ``ScenarioChange`` is one declarative edit of a base document: add, remove or
modify an entry, scale income or expenses, or override the settings. Changes
are applied in order to a private copy of the document; a change that cannot be
applied (missing target, missing percent, ...) is logged and skipped, leaving
the rest of the scenario intact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .clone import clone_document
from .currency import to_finite
from .dates import is_valid_ymd
from .definitions import AnyEntry, BaseDocument, OneOff, Recurring, Step
from .errors import ConfigError
from .kinds import ChangeKind, Direction

logger = logging.getLogger(__name__)


@dataclass
class ScenarioChange:
    """
    One edit applied to a scenario's copy of the base document.

    Fields read per kind:
        - 'transaction_add': ``entry``
        - 'transaction_remove': ``target_id``
        - 'transaction_modify': ``target_id`` with ``amount`` or ``multiplier``
          and/or a new ``date`` (one-offs only)
        - 'bulk_adjustment': ``percent_change`` with optional ``category`` and
          ``direction`` filters
        - 'income_adjust': ``multiplier`` or ``percent_change``; ``target_id``
          limits it to one entry
        - 'expense_adjust': ``percent_change``; ``category`` limits it
        - 'setting_override': any of ``start_date``, ``end_date``,
          ``starting_balance``

    ``percent_change`` is a whole percent (-15 = 15% less).
    """

    kind: str
    target_id: str = ""
    entry: AnyEntry | None = None
    amount: float | None = None
    multiplier: float | None = None
    percent_change: float | None = None
    date: str | None = None
    category: str = ""
    direction: str = ""
    start_date: str | None = None
    end_date: str | None = None
    starting_balance: float | None = None
    description: str = ""

    def __post_init__(self):
        if self.kind not in ChangeKind.all_kinds():
            raise ConfigError(f"Unknown scenario change '{self.kind}'")
        if self.direction and self.direction not in Direction.all_kinds():
            raise ConfigError(f"Unknown direction filter '{self.direction}'")


def change_problems(change: ScenarioChange, document: BaseDocument) -> list[str]:
    """
    Reasons why ``change`` cannot be applied to ``document`` (empty when it can).
    """
    problems = []
    kind = change.kind
    if kind == ChangeKind.ADD and change.entry is None:
        problems.append("new entry is required")

    if kind in (ChangeKind.REMOVE, ChangeKind.MODIFY):
        if not change.target_id:
            problems.append("target entry ID is required")
        elif document.get_entry(change.target_id) is None:
            problems.append(f"entry '{change.target_id}' not found")

    if kind == ChangeKind.MODIFY:
        if change.amount is None and change.multiplier is None and change.date is None:
            problems.append("nothing to modify")
        if change.date is not None:
            target = document.get_entry(change.target_id)
            if not is_valid_ymd(change.date):
                problems.append(f"invalid date '{change.date}'")
            elif target is not None and not isinstance(target, OneOff):
                problems.append("only one-off entries can be moved to another date")

    if kind in (ChangeKind.BULK_ADJUST, ChangeKind.EXPENSE_ADJUST):
        if change.percent_change is None:
            problems.append("percent change is required")

    if kind == ChangeKind.SETTING_OVERRIDE:
        if (
            change.start_date is None
            and change.end_date is None
            and change.starting_balance is None
        ):
            problems.append("at least one setting override is required")
        for name in ("start_date", "end_date"):
            value = getattr(change, name)
            if value is not None and not is_valid_ymd(value):
                problems.append(f"invalid {name} '{value}'")
    return problems


def _all_entries(document: BaseDocument) -> list[AnyEntry]:
    return list(document.income_streams) + list(document.entries)


def _factor(percent_change) -> float:
    return 1 + to_finite(percent_change) / 100


def _scale(document: BaseDocument, entry: AnyEntry, factor: float) -> None:
    """Scale an entry's amount, steps and occurrence overrides in place."""
    factor = max(0.0, to_finite(factor, default=1.0))
    entry.amount = abs(to_finite(entry.amount)) * factor
    if isinstance(entry, Recurring):
        entry.steps = tuple(
            Step(step.effective_from, abs(to_finite(step.amount)) * factor)
            for step in entry.steps
        )
    for override in document.overrides:
        if override.parent_id == entry.id and override.amount is not None:
            override.amount = abs(to_finite(override.amount)) * factor


def _add(document: BaseDocument, change: ScenarioChange) -> None:
    entry = clone_document(change.entry)
    if document.get_entry(entry.id) is not None:
        entry.id = f"{entry.id}-{len(document.entries)}"
    document.entries.append(entry)


def _remove(document: BaseDocument, change: ScenarioChange) -> None:
    target = change.target_id
    document.income_streams = [s for s in document.income_streams if s.id != target]
    document.entries = [e for e in document.entries if e.id != target]
    document.overrides = [o for o in document.overrides if o.parent_id != target]


def _modify(document: BaseDocument, change: ScenarioChange) -> None:
    entry = document.get_entry(change.target_id)
    if change.amount is not None:
        entry.amount = abs(to_finite(change.amount))
        if isinstance(entry, Recurring):
            # a new base amount applies to the whole series
            entry.steps = ()
    elif change.multiplier is not None:
        _scale(document, entry, change.multiplier)
    if change.date is not None:
        for override in document.overrides:
            if override.parent_id == entry.id and override.date == entry.date:
                override.date = change.date
        entry.date = change.date


def _bulk_adjust(document: BaseDocument, change: ScenarioChange) -> None:
    factor = _factor(change.percent_change)
    for entry in _all_entries(document):
        if change.category and entry.category != change.category:
            continue
        if change.direction and entry.direction != change.direction:
            continue
        _scale(document, entry, factor)


def _income_adjust(document: BaseDocument, change: ScenarioChange) -> None:
    if change.multiplier is not None:
        factor = to_finite(change.multiplier, default=1.0)
    elif change.percent_change is not None:
        factor = _factor(change.percent_change)
    else:
        factor = 1.0
    for entry in _all_entries(document):
        if not entry.is_income:
            continue
        if change.target_id and entry.id != change.target_id:
            continue
        _scale(document, entry, factor)


def _expense_adjust(document: BaseDocument, change: ScenarioChange) -> None:
    factor = _factor(change.percent_change)
    for entry in _all_entries(document):
        if entry.is_income:
            continue
        if change.category and entry.category != change.category:
            continue
        _scale(document, entry, factor)


def _setting_override(document: BaseDocument, change: ScenarioChange) -> None:
    settings = document.settings
    if change.start_date is not None:
        settings.start_date = change.start_date
    if change.end_date is not None:
        settings.end_date = change.end_date
    if change.starting_balance is not None:
        settings.starting_balance = to_finite(change.starting_balance)


_APPLY = {
    ChangeKind.ADD: _add,
    ChangeKind.REMOVE: _remove,
    ChangeKind.MODIFY: _modify,
    ChangeKind.BULK_ADJUST: _bulk_adjust,
    ChangeKind.INCOME_ADJUST: _income_adjust,
    ChangeKind.EXPENSE_ADJUST: _expense_adjust,
    ChangeKind.SETTING_OVERRIDE: _setting_override,
}


def apply_changes(document: BaseDocument, changes: list[ScenarioChange]) -> BaseDocument:
    """
    Apply scenario changes in order to a copy of ``document``.

    Each change sees the result of the previous ones. Changes that cannot be
    applied are logged at WARNING and skipped.

    Returns:
        The changed copy; ``document`` itself is not mutated
    """
    document = clone_document(document)
    for change in changes:
        problems = change_problems(change, document)
        if problems:
            logger.warning(
                "Skipping %s change '%s': %s",
                change.kind,
                change.description or change.target_id,
                "; ".join(problems),
            )
            continue
        _APPLY[change.kind](document, change)
    return document


# name -> (description, kind, percent change)
SCENARIO_TEMPLATES: dict[str, tuple[tuple[str, str, float], ...]] = {
    "conservative": (
        ("Reduce all income by 15%", ChangeKind.INCOME_ADJUST, -15),
        ("Increase all expenses by 10%", ChangeKind.EXPENSE_ADJUST, 10),
    ),
    "aggressive": (
        ("Increase all income by 30%", ChangeKind.INCOME_ADJUST, 30),
        ("Increase all expenses by 20%", ChangeKind.EXPENSE_ADJUST, 20),
    ),
    "worst-case": (
        ("Reduce all income by 30%", ChangeKind.INCOME_ADJUST, -30),
        ("Increase all expenses by 15%", ChangeKind.EXPENSE_ADJUST, 15),
    ),
    "cost-cutting": (
        ("Reduce all expenses by 25%", ChangeKind.EXPENSE_ADJUST, -25),
    ),
}


def scenario_template(name: str) -> list[ScenarioChange]:
    """
    Changes of a predefined scenario template.

    Raises:
        ConfigError: If ``name`` is not one of ``SCENARIO_TEMPLATES``
    """
    if name not in SCENARIO_TEMPLATES:
        known = ", ".join(SCENARIO_TEMPLATES)
        raise ConfigError(f"Unknown scenario template '{name}' (known: {known})")
    return [
        ScenarioChange(kind=kind, percent_change=pct, description=description)
        for description, kind, pct in SCENARIO_TEMPLATES[name]
    ]
