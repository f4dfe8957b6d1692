"""
Tests for money rounding, parsing and clamping.
"""

import math
from decimal import Decimal

from cashflowlab.core.currency import (
    DEFAULT_CURRENCY,
    PERCENT_MAX,
    PERCENT_MIN,
    Currency,
    clamp_currency,
    clamp_percent,
    parse_money,
    round_money,
    to_finite,
)


class TestCurrencyQuantize:
    def test_default_two_decimals_half_up(self):
        assert DEFAULT_CURRENCY.quantize(Decimal("1.005")) == Decimal("1.01")
        assert DEFAULT_CURRENCY.quantize(Decimal("2.665")) == Decimal("2.67")

    def test_zero_decimals(self):
        whole = Currency("jpy", decimals=0)
        assert whole.code == "JPY"
        assert whole.quantize(Decimal("1234.5")) == Decimal("1235")


class TestRoundMoney:
    def test_half_up(self):
        assert round_money(2.675) == 2.68
        assert round_money(0.125) == 0.13
        assert round_money(-0.125) == -0.13

    def test_non_finite_rounds_to_zero(self):
        assert round_money(float("nan")) == 0.0
        assert round_money(float("inf")) == 0.0
        assert round_money("abc") == 0.0
        assert round_money(None) == 0.0

    def test_currency_precision(self):
        assert round_money(1234.5, Currency("JPY", decimals=0)) == 1235.0

    def test_to_finite(self):
        assert to_finite("12.5") == 12.5
        assert to_finite(float("-inf"), default=-1.0) == -1.0


class TestParseMoney:
    def test_plain_numbers(self):
        assert parse_money(12) == 12.0
        assert parse_money("1,234.56") == 1234.56
        assert parse_money("$ 99.90") == 99.9

    def test_european_decimal_comma(self):
        assert parse_money("1.234,56") == 1234.56
        assert parse_money("12,50") == 12.5
        assert parse_money("1,234") == 1234.0

    def test_negative_forms(self):
        assert parse_money("(12.00)") == -12.0
        assert parse_money("12.00-") == -12.0
        assert parse_money("−7") == -7.0

    def test_unparsable_is_nan(self):
        for value in (None, "", "abc", True, float("inf")):
            assert math.isnan(parse_money(value))


class TestClamping:
    def test_clamp_percent_bounds(self):
        assert clamp_percent(5) == PERCENT_MAX
        assert clamp_percent(-3) == PERCENT_MIN
        assert clamp_percent(0.12345) == 0.123

    def test_clamp_percent_fallback(self):
        assert clamp_percent(float("nan")) == 0.0
        assert clamp_percent("x", fallback=0.5) == 0.5

    def test_clamp_currency(self):
        assert clamp_currency(10.005) == 10.01
        assert clamp_currency(None, fallback=3.0) == 3.0
