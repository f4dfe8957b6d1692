"""
Entry classes for CashflowLab money movements.

Money movements form a tagged union of two explicit variants: ``OneOff`` (a
single dated amount) and ``Recurring`` (a definition that fires on a schedule).
Each variant carries only its own fields and stamps its ``family`` discriminator
automatically, so callers branch on ``entry.family`` (or ``isinstance``) rather
than inferring the variant from which fields happen to be set.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Union

from .errors import ConfigError
from .kinds import F, Direction, MonthlyMode, SaleMode

LABEL_SEPARATOR = " – "


def make_entry_id(prefix: str, *parts) -> str:
    """
    Generate a deterministic entry ID from its identifying content.

    Args:
        prefix: Family prefix ('oneoff', 'recurring', ...)
        parts: Values that identify the entry

    Returns:
        ``<prefix>-<12 hex chars>``
    """
    content = ":".join(str(part) for part in parts)
    return f"{prefix}-{hashlib.sha256(content.encode()).hexdigest()[:12]}"


@dataclass(frozen=True)
class Step:
    """Absolute amount that replaces the base amount from ``effective_from`` onward."""

    effective_from: str
    amount: float


@dataclass
class Entry:
    """
    Base class for all money movements.

    Attributes:
        id: Unique identifier within a document (derived when omitted)
        name: Human-readable name
        category: Free-form category used in labels
        amount: Unsigned base amount; direction decides the sign
        direction: 'income' or 'expense'
        note: Free-form note, used as label when name and category are empty
        family: 'oneoff' | 'recurring' - set automatically in subclasses
    """

    id: str = ""
    name: str = ""
    category: str = ""
    amount: float = 0.0
    direction: str = Direction.EXPENSE
    note: str = ""
    family: str = None

    def __post_init__(self) -> None:
        if self.direction not in Direction.all_kinds():
            raise ConfigError(
                f"Entry '{self.id or self.name}': unknown direction '{self.direction}'"
            )

    @property
    def is_income(self) -> bool:
        return self.direction == Direction.INCOME

    def describe(self, fallback: str) -> str:
        """Source label for ledger details: 'name – category', else note, else fallback."""
        parts = [part for part in (self.name, self.category) if part]
        if not parts and self.note:
            parts.append(self.note)
        return LABEL_SEPARATOR.join(parts) or fallback


@dataclass
class OneOff(Entry):
    """
    A single dated money movement.

    Examples:
        Tax refund: OneOff(date="2025-04-15", amount=820, direction="income")
        Car repair: OneOff(date="2025-02-03", amount=640)
    """

    date: str = ""

    def __post_init__(self):
        super().__post_init__()
        self.family = "oneoff"
        if not self.id:
            self.id = make_entry_id(
                "oneoff", self.name, self.date, self.amount, self.direction
            )


@dataclass
class Recurring(Entry):
    """
    A recurring definition that fires on a schedule.

    Frequency-specific fields:
        - once: ``on_date`` (falls back to ``start_date``)
        - daily: ``skip_weekends``
        - weekly / biweekly: ``weekdays`` (0=Monday .. 6=Sunday)
        - monthly: ``monthly_mode`` 'day' with ``day_of_month``, or 'nth' with
          ``nth`` (1-5 or 'last') and ``nth_weekday``

    Amount fields:
        - ``steps``: ascending absolute overrides; the last one in effect wins
        - ``escalator_pct``: whole-percent compounding per calendar month
          elapsed since the previous occurrence
    """

    frequency: str = F.MONTHLY
    start_date: str = ""
    end_date: str = ""
    steps: tuple[Step, ...] = ()
    escalator_pct: float = 0.0
    on_date: str | None = None
    skip_weekends: bool = False
    weekdays: tuple[int, ...] = ()
    monthly_mode: str = MonthlyMode.DAY
    day_of_month: int | None = None
    nth: int | str | None = None
    nth_weekday: int | None = None

    def __post_init__(self):
        super().__post_init__()
        self.family = "recurring"
        self.steps = tuple(self.steps or ())
        self.weekdays = tuple(self.weekdays or ())
        if not self.id:
            self.id = make_entry_id(
                "recurring",
                self.name,
                self.frequency,
                self.start_date,
                self.end_date,
                self.amount,
                self.direction,
            )


AnyEntry = Union[OneOff, Recurring]


@dataclass
class OccurrenceOverride:
    """
    Edit or removal of a single occurrence of an entry.

    ``parent_id`` names a one-off, a recurring entry or an income stream and
    ``date`` is the occurrence being changed. A deleted occurrence is skipped;
    otherwise ``amount`` (unsigned) replaces the amount it resolves to. An
    override on a date where its parent does not fire has no effect.
    """

    parent_id: str
    date: str
    amount: float | None = None
    deleted: bool = False
    id: str = ""

    def __post_init__(self):
        if not self.id:
            self.id = make_entry_id("override", self.parent_id, self.date)

    @property
    def key(self) -> tuple[str, str]:
        return self.parent_id, self.date


@dataclass
class Adjustment:
    """Manual balance adjustment on a single date (signed amount)."""

    date: str
    amount: float
    note: str = ""

    def describe(self) -> str:
        return f"Adjustment{LABEL_SEPARATOR}{self.note}" if self.note else "Adjustment"


@dataclass
class Settings:
    """Projection window and opening balance."""

    start_date: str
    end_date: str
    starting_balance: float = 0.0


@dataclass
class BaseDocument:
    """
    Validated in-memory snapshot of everything a projection reads.

    Attributes:
        settings: Projection window and starting balance
        adjustments: Manual balance adjustments
        entries: One-off entries (``OneOff`` or recurring ``Recurring``)
        income_streams: Recurring income streams (the what-if stream list)
        overrides: Per-occurrence edits and deletions
    """

    settings: Settings
    adjustments: list[Adjustment] = field(default_factory=list)
    entries: list[AnyEntry] = field(default_factory=list)
    income_streams: list[Recurring] = field(default_factory=list)
    overrides: list[OccurrenceOverride] = field(default_factory=list)

    def one_offs(self) -> list[OneOff]:
        return [entry for entry in self.entries if entry.family == "oneoff"]

    def recurring_entries(self) -> list[Recurring]:
        return [entry for entry in self.entries if entry.family == "recurring"]

    def recurring_definitions(self) -> list[Recurring]:
        """Income streams followed by recurring entries, in document order."""
        return list(self.income_streams) + self.recurring_entries()

    def get_stream(self, stream_id: str) -> Recurring | None:
        for definition in self.recurring_definitions():
            if definition.id == stream_id:
                return definition
        return None

    def get_entry(self, entry_id: str) -> AnyEntry | None:
        """Income stream, recurring entry or one-off with the given ID."""
        for entry in list(self.income_streams) + list(self.entries):
            if entry.id == entry_id:
                return entry
        return None

    def override_map(self) -> dict[tuple[str, str], OccurrenceOverride]:
        """(parent ID, date) -> override; later overrides win."""
        return {override.key: override for override in self.overrides}


@dataclass
class SaleWindow:
    """
    Promotional period adding income on top of the regular ledger.

    In 'pct' mode each day in the window gains ``income_before_sales *
    uplift_pct`` (a fraction, 0.25 = +25%); in 'topup' mode it gains the flat
    ``topup`` amount. ``business_days_only`` skips Saturdays and Sundays.
    """

    id: str = ""
    name: str = ""
    start_date: str = ""
    end_date: str = ""
    uplift_pct: float = 0.0
    topup: float = 0.0
    mode: str = SaleMode.PCT
    business_days_only: bool = False

    def __post_init__(self):
        if not self.end_date:
            self.end_date = self.start_date
        if not self.id:
            self.id = make_entry_id("sale", self.name, self.start_date, self.end_date)

    def covers(self, ymd: str) -> bool:
        """True when ``ymd`` lies inside the window (inclusive)."""
        return bool(self.start_date) and self.start_date <= ymd <= self.end_date

    def describe(self) -> str:
        return f"Sale{LABEL_SEPARATOR}{self.name}" if self.name else "Sale"
