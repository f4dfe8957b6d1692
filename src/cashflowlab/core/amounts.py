"""
Amount resolution for recurring definitions.

The amount of an occurrence is the definition's unsigned base amount, replaced
by the latest step in effect and compounded by the monthly escalator. The sign
comes from ``direction`` and is applied by the projection engine.
"""

from __future__ import annotations

import math
from datetime import date

from .currency import to_finite
from .dates import months_between, parse_ymd
from .definitions import Recurring


def base_amount_for_date(definition: Recurring, on: date) -> float:
    """
    Base amount in effect on ``on``: ``abs(amount)`` replaced by the last step
    whose ``effective_from`` is on or before ``on``.

    Steps are expected in ascending order; scanning stops at the first step
    that is not yet effective. Steps with an unparsable date are ignored.
    """
    amount = abs(to_finite(definition.amount))
    for step in definition.steps:
        effective = parse_ymd(step.effective_from)
        if effective is None:
            continue
        if effective > on:
            break
        amount = abs(to_finite(step.amount))
    return amount


def resolve_amount(
    definition: Recurring, on: date, previous_fire_date: date | None = None
) -> float:
    """
    Resolve the unsigned amount of an occurrence.

    Args:
        definition: Recurring definition
        on: Occurrence date
        previous_fire_date: Date of the previous occurrence in the same scan,
            or None for the first occurrence

    Returns:
        Non-negative amount; 0.0 when any input is non-finite

    Example:
        A 1000 definition with ``escalator_pct=10`` firing on 2025-03-01 after a
        previous firing on 2025-01-01 resolves to ``1000 * 1.1 ** 2``.
    """
    amount = base_amount_for_date(definition, on)
    pct = to_finite(definition.escalator_pct)
    if pct and previous_fire_date is not None:
        months = months_between(previous_fire_date, on)
        factor = 1 + pct / 100
        if months > 0 and factor <= 0:
            # a fall of 100% or more wipes the amount out
            return 0.0
        if months > 0:
            try:
                amount *= factor ** months
            except OverflowError:
                return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount
