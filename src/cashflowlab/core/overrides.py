"""
Per-occurrence overrides for CashflowLab documents.

An override edits or deletes one dated occurrence of a one-off, recurring
entry or income stream without touching the rest of its series. Overrides live
on the base document and are honoured by ``compute_projection``; the
operations below return a new document and never edit their input.
"""

from __future__ import annotations

from datetime import date
from typing import NamedTuple

from .clone import clone_document
from .currency import clamp_currency, to_finite
from .dates import parse_ymd, to_ymd
from .definitions import BaseDocument, OccurrenceOverride, OneOff
from .errors import ConfigError
from .projection import projection_window
from .recurrence import fires
from .scanner import iter_occurrences


class OccurrenceRecord(NamedTuple):
    """
    One row of the expanded occurrence table.

    Attributes:
        date: Occurrence date (YMD)
        parent_id: ID of the entry or stream the occurrence belongs to
        label: 'name – category', else note, else the parent ID
        amount: Unsigned amount after overrides
        direction: 'income' or 'expense'
        recurring: False for one-offs
        override_id: ID of the override applied, or None
    """

    date: str
    parent_id: str
    label: str
    amount: float
    direction: str
    recurring: bool
    override_id: str | None = None

    @property
    def is_modified(self) -> bool:
        return self.override_id is not None


def _occurs_on(document: BaseDocument, parent_id: str, on: date | str) -> str:
    """Validate that ``parent_id`` has an occurrence on ``on``; returns its YMD."""
    entry = document.get_entry(parent_id)
    if entry is None:
        raise ConfigError(f"Unknown entry '{parent_id}'")
    day = parse_ymd(on)
    if day is None:
        raise ConfigError(f"Invalid occurrence date '{on}'")
    ymd = to_ymd(day)
    if isinstance(entry, OneOff):
        occurs = entry.date == ymd
    else:
        occurs = fires(day, entry)
    if not occurs:
        raise ConfigError(f"Entry '{parent_id}' has no occurrence on {ymd}")
    return ymd


def _store(document: BaseDocument, override: OccurrenceOverride) -> BaseDocument:
    """Copy of ``document`` with ``override`` replacing any override on the same occurrence."""
    document = clone_document(document)
    previous = document.override_map().get(override.key)
    if previous is not None:
        override.id = previous.id
    document.overrides = [o for o in document.overrides if o.key != override.key]
    document.overrides.append(override)
    return document


def override_occurrence(
    document: BaseDocument, parent_id: str, on: date | str, amount: float
) -> BaseDocument:
    """
    Replace the amount of a single occurrence.

    Args:
        document: Base document (not mutated)
        parent_id: Entry or income stream ID
        on: Occurrence date
        amount: New unsigned amount, rounded to cents

    Returns:
        A new document carrying the override

    Raises:
        ConfigError: If the entry is unknown or does not occur on ``on``
    """
    ymd = _occurs_on(document, parent_id, on)
    return _store(
        document,
        OccurrenceOverride(parent_id, ymd, amount=abs(clamp_currency(amount))),
    )


def delete_occurrence(document: BaseDocument, parent_id: str, on: date | str) -> BaseDocument:
    """Remove a single occurrence from its series (see ``override_occurrence``)."""
    ymd = _occurs_on(document, parent_id, on)
    return _store(document, OccurrenceOverride(parent_id, ymd, deleted=True))


def revert_occurrence(document: BaseDocument, parent_id: str, on: date | str) -> BaseDocument:
    """Drop the override of an occurrence so it follows its series again."""
    day = parse_ymd(on)
    key = (parent_id, to_ymd(day) if day is not None else str(on))
    document = clone_document(document)
    document.overrides = [o for o in document.overrides if o.key != key]
    return document


def expand_occurrences(
    document: BaseDocument,
    start: date | str | None = None,
    end: date | str | None = None,
) -> list[OccurrenceRecord]:
    """
    Every occurrence of a document's entries with overrides applied.

    Amounts are resolved with steps and escalators but without what-if tweaks.
    Deleted occurrences are left out.

    Args:
        document: Base document
        start / end: Range of interest; default to the projection window

    Returns:
        Records sorted by date; ties keep stream-then-entry document order
    """
    bounds = projection_window(document)
    since = parse_ymd(start) if start is not None else (bounds[0] if bounds else None)
    until = parse_ymd(end) if end is not None else (bounds[1] if bounds else None)
    if since is None or until is None or until < since:
        return []

    overrides = document.override_map()
    records = []

    def add(entry, day: date, amount: float, recurring: bool) -> None:
        ymd = to_ymd(day)
        override = overrides.get((entry.id, ymd))
        if override is not None:
            if override.deleted:
                return
            if override.amount is not None:
                amount = abs(to_finite(override.amount))
        records.append(
            OccurrenceRecord(
                date=ymd,
                parent_id=entry.id,
                label=entry.describe(entry.id),
                amount=amount,
                direction=entry.direction,
                recurring=recurring,
                override_id=override.id if override is not None else None,
            )
        )

    for entry in list(document.income_streams) + list(document.entries):
        if isinstance(entry, OneOff):
            day = parse_ymd(entry.date)
            if day is not None and since <= day <= until:
                add(entry, day, abs(to_finite(entry.amount)), False)
            continue
        for occurrence in iter_occurrences(entry, since, until):
            add(entry, occurrence.date, occurrence.amount, True)

    records.sort(key=lambda record: record.date)
    return records
