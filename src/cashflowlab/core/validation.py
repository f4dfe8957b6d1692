"""
Validation and reporting utilities for CashflowLab.

Raw documents (camelCase mappings read from YAML/JSON) pass through a single
validation step before they reach the engine. In lenient mode malformed items
are dropped or clamped, each change is recorded in the report and logged at
WARNING. In strict mode the same issues are recorded and no document is
produced, letting the loader raise ``DocumentValidationError``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any

from .changes import (
    SCENARIO_TEMPLATES,
    ScenarioChange,
    change_problems,
    scenario_template,
)
from .currency import (
    PERCENT_MAX,
    PERCENT_MIN,
    SALE_PERCENT_MAX,
    clamp_currency,
    clamp_percent,
    parse_money,
    to_finite,
)
from .dates import (
    add_days,
    is_valid_ymd,
    normalize_weekdays,
    parse_nth,
    parse_weekday,
    to_ymd,
)
from .definitions import (
    Adjustment,
    BaseDocument,
    OccurrenceOverride,
    OneOff,
    Recurring,
    SaleWindow,
    Settings,
    Step,
)
from .kinds import F, ChangeKind, Direction, MonthlyMode, SaleMode, TweakMode
from .whatif import GlobalTweak, Sandbox, SaleConfig, Tweak, Tweaks, reconcile_tweaks

logger = logging.getLogger(__name__)

# Default projection horizon when settings carry no usable end date
DEFAULT_HORIZON_DAYS = 364
MAX_SALE_NAME = 120

# Legacy 'lastEdited' values accepted as tweak modes
_TWEAK_MODE_ALIASES = {"pct": TweakMode.PERCENT}


@dataclass
class ValidationIssue:
    """
    A single problem found while validating a raw document.

    Attributes:
        path: Location in the raw document (e.g. 'incomeStreams[2].startDate')
        message: What was wrong and what was done about it
        item_id: ID of the affected entry, when known
        severity: 'error' (item dropped) or 'warning' (value clamped/defaulted)
    """

    path: str
    message: str
    item_id: str | None = None
    severity: str = "error"

    def __str__(self) -> str:
        where = f"{self.path} ({self.item_id})" if self.item_id else self.path
        return f"{where}: {self.message}"


@dataclass
class ValidationReport:
    """
    Structured validation report for a base document.

    Provides machine-readable validation results with clear error/warning
    categorization for CLI exit codes and user feedback. ``document`` holds the
    validated document, or None when strict validation found issues.
    """

    issues: list[ValidationIssue] = None
    document: BaseDocument | None = None
    strict: bool = False

    def __post_init__(self):
        """Initialize default empty list."""
        if self.issues is None:
            self.issues = []

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]

    def has_errors(self) -> bool:
        """Check if any item had to be dropped."""
        return bool(self.errors)

    def has_warnings(self) -> bool:
        """Check if any value had to be clamped or defaulted."""
        return bool(self.warnings)

    def is_valid(self) -> bool:
        """Check if validation passed (no errors, warnings are OK)."""
        return not self.has_errors()

    def get_exit_code(self) -> int:
        """
        Get appropriate CLI exit code.

        Returns:
            0: Valid (no issues)
            1: Errors present
            2: Warnings only
        """
        if self.has_errors():
            return 1
        elif self.has_warnings():
            return 2
        else:
            return 0

    def problem_ids(self) -> list[str]:
        """IDs (or paths) of every item with an issue, in report order."""
        seen: list[str] = []
        for issue in self.issues:
            key = issue.item_id or issue.path
            if key not in seen:
                seen.append(key)
        return seen

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "errors": [vars(issue) for issue in self.errors],
            "warnings": [vars(issue) for issue in self.warnings],
            "has_errors": self.has_errors(),
            "has_warnings": self.has_warnings(),
            "is_valid": self.is_valid(),
            "exit_code": self.get_exit_code(),
        }

    def __str__(self) -> str:
        """Human-readable string representation."""
        lines = []

        if self.is_valid():
            lines.append("✅ Validation passed")
        else:
            lines.append("❌ Validation failed")

        for issue in self.errors:
            lines.append(f"Dropped {issue}")
        for issue in self.warnings:
            lines.append(f"Adjusted {issue}")

        return "\n".join(lines)


@dataclass
class SandboxReport(ValidationReport):
    """Validation report for a what-if sandbox; ``sandbox`` is None on strict failure."""

    sandbox: Sandbox | None = None


class _Collector:
    """Accumulates issues and logs them in lenient mode."""

    def __init__(self, strict: bool, prefix: str = ""):
        self.strict = strict
        self.prefix = prefix
        self.issues: list[ValidationIssue] = []

    def _add(self, severity: str, path: str, message: str, item_id: str | None):
        issue = ValidationIssue(f"{self.prefix}{path}", message, item_id, severity)
        self.issues.append(issue)
        if not self.strict:
            logger.warning("%s", issue)

    def drop(self, path: str, message: str, item_id: str | None = None) -> None:
        self._add("error", path, message, item_id)

    def adjust(self, path: str, message: str, item_id: str | None = None) -> None:
        self._add("warning", path, message, item_id)


def _is_mapping(value) -> bool:
    return isinstance(value, dict)


def _text(value) -> str:
    return value if isinstance(value, str) else ""


def _raw_id(raw: dict, key: str = "id") -> str | None:
    value = raw.get(key)
    if isinstance(value, str) and value:
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def _amount(value) -> float:
    """Parse a raw amount; missing values are 0, unparsable ones are nan."""
    if value is None or value == "":
        return 0.0
    return parse_money(value)


def _steps(raw_steps, path: str, item_id: str | None, out: _Collector) -> tuple[Step, ...]:
    if raw_steps is None:
        return ()
    if not isinstance(raw_steps, list):
        out.adjust(f"{path}.steps", "steps must be a list; ignored", item_id)
        return ()
    steps = []
    for i, raw in enumerate(raw_steps):
        effective = raw.get("effectiveFrom") if _is_mapping(raw) else None
        amount = _amount(raw.get("amount")) if _is_mapping(raw) else math.nan
        if not is_valid_ymd(effective) or math.isnan(amount):
            out.adjust(f"{path}.steps[{i}]", "invalid step removed", item_id)
            continue
        steps.append(Step(effective, abs(amount)))
    steps.sort(key=lambda step: step.effective_from)
    return tuple(steps)


def _escalator(raw: dict, path: str, item_id: str | None, out: _Collector) -> float:
    value = raw.get("escalatorPct")
    if value is None or value == "":
        return 0.0
    pct = to_finite(value, default=math.nan)
    if math.isnan(pct):
        out.adjust(f"{path}.escalatorPct", "non-numeric escalator reset to 0", item_id)
        return 0.0
    return pct


def _recurring(
    raw: dict,
    path: str,
    out: _Collector,
    direction: str,
    default_frequency: str | None,
    fallback_start: str | None = None,
    fallback_end: str | None = None,
) -> Recurring | None:
    """Validate one raw recurring definition (income stream or recurring entry)."""
    item_id = _raw_id(raw)

    amount = _amount(raw.get("amount"))
    if math.isnan(amount):
        out.drop(path, "amount is not a finite number", item_id)
        return None

    frequency = raw.get("frequency") or default_frequency
    if frequency not in F.all_kinds():
        out.drop(path, f"unknown frequency '{frequency}'", item_id)
        return None

    start = raw.get("startDate")
    end = raw.get("endDate")
    on_date = raw.get("onDate") if is_valid_ymd(raw.get("onDate")) else None
    if not is_valid_ymd(start):
        start = on_date or fallback_start
    if not is_valid_ymd(end):
        end = on_date or fallback_end or raw.get("date")
    if not is_valid_ymd(start) or not is_valid_ymd(end):
        out.drop(path, "missing or invalid startDate/endDate", item_id)
        return None
    if end < start:
        out.adjust(path, f"endDate {end} before startDate {start}; clamped", item_id)
        end = start

    fields: dict[str, Any] = {}
    if frequency == F.ONCE:
        fields["on_date"] = on_date or start
    elif frequency == F.DAILY:
        fields["skip_weekends"] = bool(raw.get("skipWeekends"))
    elif frequency in (F.WEEKLY, F.BIWEEKLY):
        if "weekdays" in raw:
            weekdays = normalize_weekdays(raw.get("weekdays"))
        else:
            # legacy field, numbered from 0=Sunday
            weekdays = normalize_weekdays(raw.get("dayOfWeek"), sunday_first=True)
        if not weekdays:
            weekdays = (date.fromisoformat(start).weekday(),)
            out.adjust(
                f"{path}.weekdays",
                f"no valid weekday; defaulted to the start date's weekday ({weekdays[0]})",
                item_id,
            )
        fields["weekdays"] = weekdays
    else:
        mode = MonthlyMode.NTH if raw.get("monthlyMode") == MonthlyMode.NTH else MonthlyMode.DAY
        fields["monthly_mode"] = mode
        if mode == MonthlyMode.NTH:
            nth = parse_nth(raw.get("nth", raw.get("nthWeek")))
            weekday = parse_weekday(raw.get("nthWeekday"), sunday_first=True)
            if nth is None or weekday is None:
                out.drop(path, "monthly nth mode needs nth (1-5 or 'last') and nthWeekday", item_id)
                return None
            fields["nth"] = nth
            fields["nth_weekday"] = weekday
        else:
            raw_day = raw.get("dayOfMonth")
            day = to_finite(raw_day, default=math.nan) if raw_day is not None else math.nan
            if math.isnan(day):
                day = int(start[8:10])
                out.adjust(
                    f"{path}.dayOfMonth", f"missing dayOfMonth; defaulted to {day}", item_id
                )
            elif not 1 <= day <= 31 or not float(day).is_integer():
                clamped = int(min(max(round(day), 1), 31))
                out.adjust(f"{path}.dayOfMonth", f"{raw_day} clamped to {clamped}", item_id)
                day = clamped
            fields["day_of_month"] = int(day)

    return Recurring(
        id=item_id or "",
        name=_text(raw.get("name")),
        category=_text(raw.get("category")),
        amount=abs(amount),
        direction=direction,
        note=_text(raw.get("note")),
        frequency=frequency,
        start_date=start,
        end_date=end,
        steps=_steps(raw.get("steps"), path, item_id, out),
        escalator_pct=_escalator(raw, path, item_id, out),
        **fields,
    )


def _direction(raw: dict) -> str:
    value = raw.get("direction", raw.get("type"))
    return Direction.INCOME if value == Direction.INCOME else Direction.EXPENSE


def _one_off(raw, path: str, out: _Collector) -> OneOff | Recurring | None:
    if not _is_mapping(raw):
        out.drop(path, "entry must be a mapping")
        return None
    direction = _direction(raw)
    if raw.get("recurring") or raw.get("frequency"):
        return _recurring(raw, path, out, direction, default_frequency=None)

    item_id = _raw_id(raw)
    amount = _amount(raw.get("amount"))
    if math.isnan(amount):
        out.drop(path, "amount is not a finite number", item_id)
        return None
    if not is_valid_ymd(raw.get("date")):
        out.drop(path, "missing or invalid date", item_id)
        return None
    return OneOff(
        id=item_id or "",
        name=_text(raw.get("name")),
        category=_text(raw.get("category")),
        amount=abs(amount),
        direction=direction,
        note=_text(raw.get("note")),
        date=raw["date"],
    )


def _override(
    raw, path: str, out: _Collector, document: BaseDocument
) -> OccurrenceOverride | None:
    """Validate one raw per-occurrence override against the document's entries."""
    if not _is_mapping(raw):
        out.drop(path, "override must be a mapping")
        return None
    item_id = _raw_id(raw)
    parent_id = _raw_id(raw, "parentId")
    if parent_id is None or document.get_entry(parent_id) is None:
        out.drop(path, f"unknown parent entry {raw.get('parentId')!r}", item_id)
        return None
    on = raw.get("instanceDate", raw.get("date"))
    if not is_valid_ymd(on):
        out.drop(path, "missing or invalid instanceDate", item_id)
        return None

    modifications = raw.get("modifications")
    if not _is_mapping(modifications):
        modifications = {}
    raw_amount = modifications.get("amount", raw.get("amount"))
    amount = None
    if raw_amount is not None and raw_amount != "":
        amount = _amount(raw_amount)
        if math.isnan(amount):
            out.drop(path, "amount is not a finite number", item_id)
            return None
        amount = abs(amount)
    deleted = bool(raw.get("deleted"))
    if amount is None and not deleted:
        out.drop(path, "override sets no amount and does not delete", item_id)
        return None
    return OccurrenceOverride(
        parent_id, on, amount=amount, deleted=deleted, id=item_id or ""
    )


def _adjustment(raw, path: str, out: _Collector) -> Adjustment | None:
    if not _is_mapping(raw):
        out.drop(path, "adjustment must be a mapping")
        return None
    amount = _amount(raw.get("amount"))
    if math.isnan(amount):
        out.drop(path, "amount is not a finite number")
        return None
    if not is_valid_ymd(raw.get("date")):
        out.drop(path, "missing or invalid date")
        return None
    return Adjustment(raw["date"], amount, _text(raw.get("note")))


def _settings(raw, out: _Collector, today: date | None) -> Settings:
    if not _is_mapping(raw):
        if raw is not None:
            out.drop("settings", "settings must be a mapping; defaults used")
        raw = {}
    start = raw.get("startDate")
    end = raw.get("endDate")
    if not is_valid_ymd(start):
        fallback = to_ymd(today or date.today())
        if start is not None:
            out.adjust("settings.startDate", f"invalid startDate; defaulted to {fallback}")
        start = fallback
    if not is_valid_ymd(end):
        fallback = add_days(start, DEFAULT_HORIZON_DAYS)
        if end is not None:
            out.adjust("settings.endDate", f"invalid endDate; defaulted to {fallback}")
        end = fallback
    if end < start:
        out.adjust("settings.endDate", f"endDate {end} before startDate {start}; clamped")
        end = start
    balance = _amount(raw.get("startingBalance"))
    if math.isnan(balance):
        out.adjust("settings.startingBalance", "non-numeric starting balance reset to 0")
        balance = 0.0
    return Settings(start, end, balance)


def _list(raw: dict, key: str, out: _Collector, alias: str | None = None) -> list:
    value = raw.get(key)
    if value is None and alias:
        value = raw.get(alias)
    if value is None:
        return []
    if not isinstance(value, list):
        out.drop(key, "expected a list; section ignored")
        return []
    return value


def _dedupe_ids(entries: list, out: _Collector, label: str) -> None:
    seen: set[str] = set()
    for i, entry in enumerate(entries):
        if entry.id in seen:
            new_id = f"{entry.id}-{i}"
            out.adjust(f"{label}[{i}].id", f"duplicate id renamed to '{new_id}'", entry.id)
            entry.id = new_id
        seen.add(entry.id)


def _build_document(raw, out: _Collector, today: date | None) -> BaseDocument:
    if not _is_mapping(raw):
        out.drop("<root>", "document root must be a mapping; empty document used")
        raw = {}
    settings = _settings(raw.get("settings"), out, today)

    adjustments = []
    for i, item in enumerate(_list(raw, "adjustments", out)):
        adjustment = _adjustment(item, f"adjustments[{i}]", out)
        if adjustment is not None:
            adjustments.append(adjustment)

    entries = []
    for i, item in enumerate(_list(raw, "oneOffEntries", out, alias="oneOffs")):
        entry = _one_off(item, f"oneOffEntries[{i}]", out)
        if entry is not None:
            entries.append(entry)

    for i, item in enumerate(_list(raw, "expenseStreams", out)):
        path = f"expenseStreams[{i}]"
        if not _is_mapping(item):
            out.drop(path, "legacy expense stream must be a mapping")
            continue
        entry = _recurring(
            item,
            path,
            out,
            Direction.EXPENSE,
            default_frequency=F.ONCE,
            fallback_start=settings.start_date,
            fallback_end=settings.end_date,
        )
        if entry is not None:
            entries.append(entry)

    streams = []
    for i, item in enumerate(_list(raw, "incomeStreams", out)):
        path = f"incomeStreams[{i}]"
        if not _is_mapping(item):
            out.drop(path, "income stream must be a mapping")
            continue
        stream = _recurring(item, path, out, Direction.INCOME, default_frequency=F.ONCE)
        if stream is not None:
            streams.append(stream)

    _dedupe_ids(entries, out, "oneOffEntries")
    _dedupe_ids(streams, out, "incomeStreams")
    document = BaseDocument(settings, adjustments, entries, streams)

    overrides: dict[tuple[str, str], OccurrenceOverride] = {}
    for i, item in enumerate(_list(raw, "transactionOverrides", out, alias="overrides")):
        path = f"transactionOverrides[{i}]"
        override = _override(item, path, out, document)
        if override is None:
            continue
        if override.key in overrides:
            out.adjust(
                path,
                f"duplicate override of {override.parent_id} on {override.date}; "
                "the later one wins",
                override.id,
            )
        overrides[override.key] = override
    document.overrides = list(overrides.values())
    return document


def validate_document(raw, strict: bool = False, today: date | None = None) -> ValidationReport:
    """
    Validate a raw base document.

    Args:
        raw: camelCase mapping with settings, adjustments, oneOffEntries,
            incomeStreams and legacy expenseStreams
        strict: When True, any issue leaves ``report.document`` as None
        today: Reference date for defaulted settings (default: today)

    Returns:
        ValidationReport carrying the validated BaseDocument (lenient mode, or
        strict mode without issues)
    """
    out = _Collector(strict)
    document = _build_document(raw, out, today)
    report = ValidationReport(issues=out.issues, strict=strict)
    if not (strict and out.issues):
        report.document = document
    return report


def _tweak(raw, path: str, out: _Collector) -> Tweak:
    if not _is_mapping(raw):
        out.adjust(path, "tweak must be a mapping; reset")
        return Tweak()
    mode = raw.get("mode", raw.get("lastEdited", TweakMode.PERCENT))
    mode = _TWEAK_MODE_ALIASES.get(mode, mode)
    if mode not in TweakMode.all_kinds():
        out.adjust(f"{path}.mode", f"unknown mode '{mode}'; using percent")
        mode = TweakMode.PERCENT

    def optional_money(key: str) -> float | None:
        value = raw.get(key)
        if value is None:
            return None
        num = to_finite(value, default=math.nan)
        return None if math.isnan(num) else clamp_currency(num)

    return Tweak(
        pct=_percent(raw.get("pct"), f"{path}.pct", out),
        delta=clamp_currency(raw.get("delta")),
        effective=optional_money("effective"),
        weekly_target=optional_money("weeklyTarget"),
        mode=mode,
    )


def _percent(value, path: str, out: _Collector, hi: float = PERCENT_MAX) -> float:
    if value is None:
        return 0.0
    num = to_finite(value, default=math.nan)
    pct = clamp_percent(value, PERCENT_MIN, hi)
    if math.isnan(num) or not PERCENT_MIN <= num <= hi:
        out.adjust(path, f"percent {value!r} clamped to {pct}")
    return pct


def _sale(raw, out: _Collector, default_start: str) -> SaleConfig:
    if not _is_mapping(raw):
        return SaleConfig()
    legacy_start = raw.get("startDate") if is_valid_ymd(raw.get("startDate")) else default_start
    legacy_end = raw.get("endDate") if is_valid_ymd(raw.get("endDate")) else legacy_start
    if legacy_end < legacy_start:
        legacy_end = legacy_start

    entries = raw.get("entries")
    if not isinstance(entries, list):
        legacy = any(
            raw.get(key) for key in ("startDate", "endDate", "pct", "topup", "businessDaysOnly")
        )
        entries = [{**raw, "startDate": legacy_start, "endDate": legacy_end}] if legacy else []

    windows = []
    for i, item in enumerate(entries):
        path = f"tweaks.sale.entries[{i}]"
        if not _is_mapping(item):
            out.drop(path, "sale entry must be a mapping")
            continue
        start = item.get("startDate") if is_valid_ymd(item.get("startDate")) else legacy_start
        end = item.get("endDate") if is_valid_ymd(item.get("endDate")) else start
        if end < start:
            out.adjust(path, f"endDate {end} before startDate {start}; clamped", _raw_id(item))
            end = start
        pct = item.get("upliftPct", item.get("pct"))
        mode = item.get("mode", item.get("lastEdited"))
        windows.append(
            SaleWindow(
                id=_raw_id(item) or "",
                name=_text(item.get("name")).strip()[:MAX_SALE_NAME],
                start_date=start,
                end_date=end,
                uplift_pct=_percent(pct, f"{path}.pct", out, hi=SALE_PERCENT_MAX),
                topup=clamp_currency(item.get("topup")),
                mode=SaleMode.TOPUP if mode == SaleMode.TOPUP else SaleMode.PCT,
                business_days_only=bool(item.get("businessDaysOnly")),
            )
        )
    return SaleConfig(enabled=bool(raw.get("enabled")), windows=windows)


def _change(raw, path: str, out: _Collector, base: BaseDocument) -> ScenarioChange | None:
    """Validate one raw scenario change against the sandbox base."""
    if not _is_mapping(raw):
        out.drop(path, "change must be a mapping")
        return None
    item_id = _raw_id(raw)
    kind = raw.get("type", raw.get("kind"))
    if kind not in ChangeKind.all_kinds():
        out.drop(path, f"unknown change type {kind!r}", item_id)
        return None
    values = raw.get("changes")
    if not _is_mapping(values):
        values = {}

    numbers = {}
    for key in ("amount", "amountMultiplier", "percentChange", "startingBalance"):
        value = values.get(key)
        if value is None or value == "":
            numbers[key] = None
            continue
        num = parse_money(value)
        if math.isnan(num):
            out.drop(f"{path}.changes.{key}", f"{value!r} is not a finite number", item_id)
            return None
        numbers[key] = num

    entry = None
    new_entry = values.get("newTransaction")
    if _is_mapping(new_entry):
        defaults = {"date": base.settings.start_date, "name": "Unnamed", "type": "expense"}
        entry = _one_off({**defaults, **new_entry}, f"{path}.changes.newTransaction", out)
        if entry is None:
            return None

    direction = values.get("typeFilter") or ""
    if direction not in ("", *Direction.all_kinds()):
        out.adjust(f"{path}.changes.typeFilter", f"unknown type {direction!r}; ignored", item_id)
        direction = ""
    if values.get("frequency") is not None:
        out.adjust(
            f"{path}.changes.frequency", "frequency changes are not supported; ignored", item_id
        )

    change = ScenarioChange(
        kind=kind,
        target_id=_raw_id(raw, "targetId") or "",
        entry=entry,
        amount=numbers["amount"],
        multiplier=numbers["amountMultiplier"],
        percent_change=numbers["percentChange"],
        date=values.get("date"),
        category=_text(values.get("categoryFilter")),
        direction=direction,
        start_date=values.get("startDate"),
        end_date=values.get("endDate"),
        starting_balance=numbers["startingBalance"],
        description=_text(raw.get("description")),
    )
    problems = change_problems(change, base)
    if problems:
        out.drop(path, "; ".join(problems), item_id)
        return None
    return change


def _changes(raw: dict, out: _Collector, base: BaseDocument) -> list[ScenarioChange]:
    changes = []
    template = raw.get("template")
    if template is not None:
        if isinstance(template, str) and template in SCENARIO_TEMPLATES:
            changes.extend(scenario_template(template))
        else:
            out.drop("template", f"unknown scenario template {template!r}")
    for i, item in enumerate(_list(raw, "changes", out)):
        change = _change(item, f"changes[{i}]", out, base)
        if change is not None:
            changes.append(change)
    return changes


def validate_sandbox(
    raw,
    fallback_base: BaseDocument | None = None,
    strict: bool = False,
    today: date | None = None,
) -> SandboxReport:
    """
    Validate a raw what-if sandbox ``{base, tweaks, changes}``.

    ``changes`` is a list of structured scenario changes and ``template`` may
    name one of ``SCENARIO_TEMPLATES``, whose changes run first.

    Args:
        raw: Raw sandbox mapping
        fallback_base: Base document used when ``raw`` has no usable 'base'
        strict: When True, any issue leaves ``report.sandbox`` as None
        today: Reference date for defaulted settings

    Returns:
        SandboxReport carrying the reconciled Sandbox
    """
    out = _Collector(strict)
    if not _is_mapping(raw):
        out.drop("<root>", "sandbox root must be a mapping")
        raw = {}

    if _is_mapping(raw.get("base")):
        base_out = _Collector(strict, prefix="base.")
        base = _build_document(raw["base"], base_out, today)
        out.issues.extend(base_out.issues)
    elif fallback_base is not None:
        base = fallback_base
    else:
        out.drop("base", "sandbox has no base document; empty document used")
        base = _build_document({}, _Collector(strict), today)

    tweaks_raw = raw.get("tweaks")
    if tweaks_raw is None:
        tweaks_raw = {}
    elif not _is_mapping(tweaks_raw):
        out.drop("tweaks", "tweaks must be a mapping; defaults used")
        tweaks_raw = {}

    global_raw = tweaks_raw.get("global")
    global_raw = global_raw if _is_mapping(global_raw) else {}
    global_tweak = GlobalTweak(
        pct=_percent(global_raw.get("pct"), "tweaks.global.pct", out),
        delta=clamp_currency(global_raw.get("delta")),
    )

    streams_raw = tweaks_raw.get("perStream", tweaks_raw.get("streams"))
    per_stream = {}
    if _is_mapping(streams_raw):
        for stream_id, item in streams_raw.items():
            per_stream[str(stream_id)] = _tweak(item, f"tweaks.perStream.{stream_id}", out)

    evaluation_start = tweaks_raw.get("evaluationStartDate", tweaks_raw.get("startDate"))
    evaluation_end = tweaks_raw.get("evaluationEndDate", tweaks_raw.get("endDate"))
    evaluation_start = evaluation_start if is_valid_ymd(evaluation_start) else ""
    evaluation_end = evaluation_end if is_valid_ymd(evaluation_end) else ""

    tweaks = Tweaks(
        global_tweak=global_tweak,
        per_stream=per_stream,
        sale=_sale(
            tweaks_raw.get("sale"),
            out,
            evaluation_start or base.settings.start_date,
        ),
        evaluation_start=evaluation_start,
        evaluation_end=evaluation_end,
    )
    changes = _changes(raw, out, base)
    sandbox = reconcile_tweaks(Sandbox(base=base, tweaks=tweaks, changes=changes))

    report = SandboxReport(issues=out.issues, strict=strict)
    if not (strict and out.issues):
        report.sandbox = sandbox
        report.document = sandbox.base
    return report
