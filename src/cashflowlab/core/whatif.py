"""
What-if overlay for CashflowLab.

A ``Sandbox`` pairs a base document with a set of ``Tweaks``: a global
percent/delta adjustment, per-stream tweaks and optional sale windows. It may
also carry structured ``ScenarioChange`` edits (see ``changes``). The overlay
never edits the base document: changes are applied to a scenario copy and
tweaks go through the projection engine's ``transform_amount`` hook, so every
evaluation compares the untouched baseline against the scenario.

Every operation here is pure: it returns a new sandbox (or result) and leaves
its inputs unchanged.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace
from datetime import date

from .amounts import base_amount_for_date
from .changes import ScenarioChange, apply_changes
from .clone import clone_document
from .currency import clamp_currency, clamp_percent, round_money, to_finite
from .dates import is_valid_ymd, parse_ymd
from .definitions import BaseDocument, Recurring, SaleWindow, Settings
from .errors import ConfigError
from .kinds import FirstNegativeStatus, TweakMode
from .projection import ProjectionOverrides, ProjectionResult, compute_projection
from .recurrence import occurrences_per_week


@dataclass
class Tweak:
    """
    Per-stream what-if adjustment.

    Only the field(s) of the active ``mode`` take effect:
        - 'percent' / 'delta': ``amount * (1 + pct) + delta``
        - 'effective': ``effective`` replaces every occurrence amount
        - 'weekly': ``weekly_target`` spread over the estimated occurrences/week
    """

    pct: float = 0.0
    delta: float = 0.0
    effective: float | None = None
    weekly_target: float | None = None
    mode: str = TweakMode.PERCENT

    def __post_init__(self):
        if self.mode not in TweakMode.all_kinds():
            raise ConfigError(f"Unknown tweak mode '{self.mode}'")


@dataclass
class GlobalTweak:
    """Percent/delta adjustment applied to every recurring amount."""

    pct: float = 0.0
    delta: float = 0.0


@dataclass
class SaleConfig:
    enabled: bool = False
    windows: list[SaleWindow] = field(default_factory=list)


@dataclass
class Tweaks:
    """
    All what-if settings of a sandbox.

    Attributes:
        global_tweak: Adjustment applied before per-stream tweaks
        per_stream: Stream ID -> Tweak (entries of removed streams are inert)
        sale: Sale windows and their master switch
        evaluation_start / evaluation_end: Projection window of the evaluation;
            empty values fall back to the base settings
    """

    global_tweak: GlobalTweak = field(default_factory=GlobalTweak)
    per_stream: dict[str, Tweak] = field(default_factory=dict)
    sale: SaleConfig = field(default_factory=SaleConfig)
    evaluation_start: str = ""
    evaluation_end: str = ""


@dataclass
class Sandbox:
    """
    A base document plus the what-if layers over it.

    Attributes:
        base: Untouched base document (the baseline)
        tweaks: Amount tweaks, sale windows and evaluation window
        changes: Structured edits applied to the scenario side only
    """

    base: BaseDocument
    tweaks: Tweaks = field(default_factory=Tweaks)
    changes: list[ScenarioChange] = field(default_factory=list)


@dataclass(frozen=True)
class FirstNegativeChange:
    """How the first negative-balance date moved between baseline and scenario."""

    baseline: str | None
    scenario: str | None
    delta_days: int | None
    status: str


@dataclass(frozen=True)
class ProjectionComparison:
    """Scenario-minus-baseline deltas of the headline figures."""

    end_balance: float
    total_income: float
    total_expenses: float
    lowest_balance: float
    peak_balance: float
    negative_days: int
    first_negative: FirstNegativeChange

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class WhatIfEvaluation:
    baseline: ProjectionResult
    scenario: ProjectionResult
    comparison: ProjectionComparison


def apply_percent_delta(base, pct, delta) -> float:
    """``base * (1 + pct) + delta`` rounded to cents; 0 for non-finite input."""
    values = [to_finite(v, default=math.nan) for v in (base, pct, delta)]
    if any(math.isnan(v) for v in values):
        return 0.0
    b, p, d = values
    return round_money(b * (1 + p) + d)


def percent_for_effective(base, effective, delta=0.0) -> float:
    """
    Percent that turns ``base`` into ``effective`` alongside a flat ``delta``.

    Inverse of ``apply_percent_delta``; returns 0 when ``base`` is zero or any
    input is non-finite. The result is clamped like any stored percent.
    """
    b = to_finite(base)
    e = to_finite(effective, default=math.nan)
    d = to_finite(delta, default=math.nan)
    if b == 0 or math.isnan(e) or math.isnan(d):
        return 0.0
    return clamp_percent((e - d) / b - 1)


def evaluation_window(sandbox: Sandbox) -> tuple[str, str]:
    """Evaluation (start, end), defaulted from the base settings and ordered."""
    settings = sandbox.base.settings
    start = sandbox.tweaks.evaluation_start
    end = sandbox.tweaks.evaluation_end
    if not is_valid_ymd(start):
        start = settings.start_date
    if not is_valid_ymd(end):
        end = settings.end_date
    if is_valid_ymd(start) and (not is_valid_ymd(end) or end < start):
        end = start
    return start, end


def reconcile_tweaks(sandbox: Sandbox) -> Sandbox:
    """
    Bring the tweaks in line with the current base document.

    - every recurring definition gets a default ``Tweak()`` when it has none
    - tweaks of removed streams stay stored but have no effect
    - a weekly tweak on a stream with no weekly occurrences is demoted to
      percent mode and its target discarded
    - the evaluation window is defaulted and ordered

    Returns:
        A new, reconciled sandbox
    """
    sandbox = clone_document(sandbox)
    per_stream = sandbox.tweaks.per_stream
    for definition in sandbox.base.recurring_definitions():
        tweak = per_stream.get(definition.id)
        if tweak is None:
            per_stream[definition.id] = Tweak()
        elif tweak.mode == TweakMode.WEEKLY and occurrences_per_week(definition) <= 0:
            per_stream[definition.id] = replace(
                tweak, mode=TweakMode.PERCENT, weekly_target=None
            )
    start, end = evaluation_window(sandbox)
    sandbox.tweaks.evaluation_start = start
    sandbox.tweaks.evaluation_end = end
    return sandbox


def effective_amount(
    definition: Recurring,
    tweak: Tweak | None,
    base_amount: float,
    global_tweak: GlobalTweak | None = None,
) -> float:
    """
    Per-occurrence amount of a definition under what-if tweaks.

    Args:
        definition: Recurring definition the amount belongs to
        tweak: The definition's tweak (None behaves like ``Tweak()``)
        base_amount: Occurrence amount before tweaks
        global_tweak: Global adjustment applied ahead of percent/delta tweaks

    Returns:
        Adjusted, non-negative amount rounded to cents
    """
    tweak = tweak or Tweak()
    global_tweak = global_tweak or GlobalTweak()

    if tweak.mode == TweakMode.WEEKLY and tweak.weekly_target is not None:
        per_week = occurrences_per_week(definition)
        if per_week > 0:
            return round_money(to_finite(tweak.weekly_target) / per_week)
    if tweak.mode == TweakMode.EFFECTIVE and tweak.effective is not None:
        return round_money(tweak.effective)

    occurrence_base = abs(to_finite(base_amount))
    adjusted = apply_percent_delta(occurrence_base, global_tweak.pct, global_tweak.delta)
    return apply_percent_delta(adjusted, tweak.pct, tweak.delta)


def build_overrides(sandbox: Sandbox) -> ProjectionOverrides:
    """
    Projection overrides that apply a sandbox's tweaks.

    The transform resolves every recurring occurrence through
    ``effective_amount``; sale windows are passed only when the sale is enabled.
    """
    tweaks = sandbox.tweaks
    per_stream = dict(tweaks.per_stream)
    global_tweak = tweaks.global_tweak

    def transform(definition: Recurring, amount: float, on: date) -> float:
        return effective_amount(definition, per_stream.get(definition.id), amount, global_tweak)

    windows = list(tweaks.sale.windows) if tweaks.sale.enabled else []
    return ProjectionOverrides(transform_amount=transform, sale_windows=windows)


def scenario_document(sandbox: Sandbox, with_changes: bool = False) -> BaseDocument:
    """
    Copy of the sandbox base with its settings narrowed to the evaluation window.

    With ``with_changes`` the sandbox's scenario changes are applied first. The
    evaluation window still wins over any date a setting override sets, so
    baseline and scenario cover the same days; an overridden starting balance
    is kept.
    """
    document = clone_document(sandbox.base)
    if with_changes and sandbox.changes:
        document = apply_changes(document, sandbox.changes)
    start, end = evaluation_window(sandbox)
    document.settings = Settings(start, end, document.settings.starting_balance)
    return document


def compare_projections(
    baseline: ProjectionResult, scenario: ProjectionResult
) -> ProjectionComparison:
    """
    Compare the headline figures of two projections.

    Money deltas are ``scenario - baseline`` rounded to cents. The first
    negative date is classified as 'none' (neither goes negative), 'cleared',
    'new', 'unchanged', 'later' or 'sooner', with the shift in days when both
    go negative.
    """

    def diff(name: str) -> float:
        return round_money(getattr(scenario, name) - getattr(baseline, name))

    before = baseline.first_negative_date
    after = scenario.first_negative_date
    delta_days = None
    if not before and not after:
        status, delta_days = FirstNegativeStatus.NONE, 0
    elif before and not after:
        status = FirstNegativeStatus.CLEARED
    elif after and not before:
        status = FirstNegativeStatus.NEW
    else:
        delta_days = (parse_ymd(after) - parse_ymd(before)).days
        if delta_days == 0:
            status = FirstNegativeStatus.UNCHANGED
        elif delta_days > 0:
            status = FirstNegativeStatus.LATER
        else:
            status = FirstNegativeStatus.SOONER

    return ProjectionComparison(
        end_balance=diff("end_balance"),
        total_income=diff("total_income"),
        total_expenses=diff("total_expenses"),
        lowest_balance=diff("lowest_balance"),
        peak_balance=diff("peak_balance"),
        negative_days=scenario.negative_day_count - baseline.negative_day_count,
        first_negative=FirstNegativeChange(before, after, delta_days, status),
    )


def evaluate_scenario(sandbox: Sandbox) -> WhatIfEvaluation:
    """
    Project a sandbox with and without its tweaks and scenario changes.

    Both projections run over the sandbox base narrowed to the evaluation
    window, so the comparison isolates the effect of the what-if layers.

    Example:
        ```python
        sandbox = Sandbox(base=doc, tweaks=Tweaks(global_tweak=GlobalTweak(pct=0.1)))
        result = evaluate_scenario(sandbox)
        result.comparison.end_balance  # scenario minus baseline
        ```
    """
    sandbox = reconcile_tweaks(sandbox)
    baseline = compute_projection(scenario_document(sandbox))
    scenario = compute_projection(
        scenario_document(sandbox, with_changes=True), build_overrides(sandbox)
    )
    return WhatIfEvaluation(
        baseline=baseline,
        scenario=scenario,
        comparison=compare_projections(baseline, scenario),
    )


def _with_tweak(sandbox: Sandbox, stream_id: str, update) -> Sandbox:
    """Reconcile, apply ``update(definition, tweak) -> Tweak`` to one stream, reconcile."""
    sandbox = reconcile_tweaks(sandbox)
    definition = sandbox.base.get_stream(stream_id)
    if definition is None:
        raise ConfigError(f"Unknown stream '{stream_id}'")
    current = sandbox.tweaks.per_stream[stream_id]
    sandbox.tweaks.per_stream[stream_id] = update(definition, current)
    return reconcile_tweaks(sandbox)


def lock_stream(sandbox: Sandbox, stream_id: str, on: date | str | None = None) -> Sandbox:
    """
    Freeze a stream's current effective amount as an absolute override.

    The base amount is resolved on ``on`` (default: evaluation start), run
    through the active tweak and the global tweak, and stored in 'effective'
    mode.

    Raises:
        ConfigError: If ``stream_id`` names no recurring definition
    """

    def lock(definition: Recurring, tweak: Tweak) -> Tweak:
        when = parse_ymd(on) if on is not None else None
        if when is None:
            when = parse_ymd(evaluation_window(sandbox)[0])
        if when is None:
            base = abs(to_finite(definition.amount))
        else:
            base = base_amount_for_date(definition, when)
        locked = effective_amount(definition, tweak, base, sandbox.tweaks.global_tweak)
        return replace(tweak, effective=round_money(locked), mode=TweakMode.EFFECTIVE)

    return _with_tweak(sandbox, stream_id, lock)


def reset_stream(sandbox: Sandbox, stream_id: str) -> Sandbox:
    """Clear every override of a stream and return it to 0% percent mode."""
    return _with_tweak(sandbox, stream_id, lambda definition, tweak: Tweak())


def unlock_stream(sandbox: Sandbox, stream_id: str) -> Sandbox:
    """Release a locked stream; the stream returns to 0% percent mode."""
    return reset_stream(sandbox, stream_id)


def set_weekly_target(sandbox: Sandbox, stream_id: str, target: float) -> Sandbox:
    """Switch a stream to 'weekly' mode with the given weekly total."""
    return _with_tweak(
        sandbox,
        stream_id,
        lambda definition, tweak: replace(
            tweak, weekly_target=clamp_currency(target), mode=TweakMode.WEEKLY
        ),
    )


def set_effective(sandbox: Sandbox, stream_id: str, amount: float) -> Sandbox:
    """Switch a stream to 'effective' mode with an absolute per-occurrence amount."""
    return _with_tweak(
        sandbox,
        stream_id,
        lambda definition, tweak: replace(
            tweak, effective=clamp_currency(amount), mode=TweakMode.EFFECTIVE
        ),
    )


def set_percent(
    sandbox: Sandbox, stream_id: str, pct: float, delta: float | None = None
) -> Sandbox:
    """Switch a stream to 'percent' mode; ``delta`` is kept unless given."""

    def update(definition: Recurring, tweak: Tweak) -> Tweak:
        new_delta = tweak.delta if delta is None else clamp_currency(delta)
        return replace(
            tweak, pct=clamp_percent(pct), delta=new_delta, mode=TweakMode.PERCENT
        )

    return _with_tweak(sandbox, stream_id, update)


def set_global(sandbox: Sandbox, pct: float = 0.0, delta: float = 0.0) -> Sandbox:
    """Replace the global tweak."""
    sandbox = reconcile_tweaks(sandbox)
    sandbox.tweaks.global_tweak = GlobalTweak(clamp_percent(pct), clamp_currency(delta))
    return sandbox


def add_change(sandbox: Sandbox, change: ScenarioChange) -> Sandbox:
    """Append a structured scenario change."""
    sandbox = clone_document(sandbox)
    sandbox.changes.append(change)
    return sandbox


def clear_changes(sandbox: Sandbox) -> Sandbox:
    """Drop every structured scenario change; tweaks are kept."""
    sandbox = clone_document(sandbox)
    sandbox.changes = []
    return sandbox
