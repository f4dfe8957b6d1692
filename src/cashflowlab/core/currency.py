"""
Money precision, rounding and parsing for CashflowLab.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


class Currency:
    """
    Ledger currency precision. Amounts are rounded half-up.

    Attributes:
        code: ISO currency code (e.g., 'USD')
        decimals: Number of decimal places kept in the ledger
    """

    def __init__(self, code: str, decimals: int = 2):
        self.code = code.upper()
        self.decimals = decimals

    def quantize(self, amount: Decimal) -> Decimal:
        """Quantize amount to currency precision."""
        quantum = Decimal("1").scaleb(-self.decimals)  # 0.01 for 2 dp, 1 for 0 dp
        return amount.quantize(quantum, rounding=ROUND_HALF_UP)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency('{self.code}', decimals={self.decimals})"


DEFAULT_CURRENCY = Currency("USD", decimals=2)


def to_finite(value, default: float = 0.0) -> float:
    """Coerce a value to a finite float, returning ``default`` otherwise."""
    try:
        num = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(num):
        return default
    return num


def round_money(value, currency: Currency = DEFAULT_CURRENCY) -> float:
    """
    Round a monetary figure to the currency precision.

    Non-finite or non-numeric input rounds to 0.0. Rounding goes through
    ``Decimal(str(value))`` so that 2.675 rounds to 2.68 under HALF_UP.

    Args:
        value: Amount to round
        currency: Currency providing precision and rounding policy

    Returns:
        The rounded amount as a float
    """
    num = to_finite(value)
    if num == 0.0:
        return 0.0
    return float(currency.quantize(Decimal(repr(num))))


_DASHES = re.compile("[−–—]")
_NON_NUMERIC = re.compile(r"[^0-9.,]")


def parse_money(value) -> float:
    """
    Parse loose currency input into a float.

    Accepts numbers, accounting negatives ``(12.00)``, trailing minus signs,
    thousands separators and European decimal commas (``1.234,56``).

    Returns:
        The parsed value, or ``nan`` when parsing fails
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else math.nan
    if isinstance(value, Decimal):
        try:
            num = float(value)
        except (InvalidOperation, ValueError):
            return math.nan
        return num if math.isfinite(num) else math.nan

    text = str(value).strip()
    if not text:
        return math.nan

    negative = False
    if text.startswith("(") and text.endswith(")"):
        negative = True
        text = text[1:-1]
    text = _DASHES.sub("-", text)
    if text.endswith("-"):
        negative = True
        text = text[:-1]
    if text.startswith("-"):
        negative = True
        text = text[1:]

    text = _NON_NUMERIC.sub("", text)
    if not text:
        return math.nan

    has_comma = "," in text
    has_dot = "." in text
    if has_comma and has_dot:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif has_comma:
        parts = text.split(",")
        if len(parts) > 1 and len(parts[-1]) == 2:
            text = "".join(parts[:-1]) + "." + parts[-1]
        else:
            text = "".join(parts)

    try:
        num = float(text)
    except ValueError:
        return math.nan
    if not math.isfinite(num):
        return math.nan
    return -num if negative else num


# Percent clamp ranges (fractions: 0.1 = +10%)
PERCENT_MIN = -1.0
PERCENT_MAX = 2.0
SALE_PERCENT_MAX = 5.0


def clamp_percent(
    value, lo: float = PERCENT_MIN, hi: float = PERCENT_MAX, fallback: float = 0.0
) -> float:
    """Round a fractional percent to 3 decimals and clamp it to [lo, hi]."""
    num = to_finite(value, default=math.nan)
    if math.isnan(num):
        return fallback
    return max(lo, min(hi, round(num * 1000) / 1000))


def clamp_currency(value, fallback: float = 0.0) -> float:
    """Round a money input to cents; non-finite input yields ``fallback``."""
    num = to_finite(value, default=math.nan)
    if math.isnan(num):
        return fallback
    return round_money(num)
