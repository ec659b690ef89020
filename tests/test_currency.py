"""Tests for currency conversion and formatting."""

from decimal import Decimal

import pytest

from pocketledger.domain.currency import (
    FALLBACK_RATES,
    convert,
    currency_symbol,
    format_currency,
    normalize_rates,
)

RATES = {"USD": Decimal("1"), "EUR": Decimal("0.5"), "JPY": Decimal("150")}


@pytest.mark.parametrize("code", ["USD", "EUR", "XYZ"])
def test_same_currency_is_identity(code):
    assert convert(Decimal("12.34"), code, code, RATES) == Decimal("12.34")


def test_convert_through_base():
    assert convert(Decimal("10"), "EUR", "JPY", RATES) == Decimal("3000")
    assert convert(Decimal("100"), "USD", "EUR", RATES) == Decimal("50")


def test_missing_or_zero_rate_counts_as_one():
    assert convert(Decimal("10"), "XYZ", "EUR", RATES) == Decimal("5")
    assert convert(Decimal("10"), "EUR", "ZZZ", {"EUR": Decimal("0.5"), "ZZZ": Decimal("0")}) == Decimal("20")


def test_defaults_to_fallback_rates():
    assert convert(Decimal("1"), "USD", "EUR") == FALLBACK_RATES["EUR"]


def test_negative_amounts_convert_symmetrically():
    assert convert(Decimal("-7"), "EUR", "USD", RATES) == -convert(Decimal("7"), "EUR", "USD", RATES)


def test_normalize_rates_drops_bad_values():
    rates = normalize_rates({"eur": "0.9", "GBP": 0.8, "BAD": "x"})
    assert rates == {"EUR": Decimal("0.9"), "GBP": Decimal("0.8")}


def test_normalize_rates_drops_non_finite_values():
    rates = normalize_rates({"EUR": "NaN", "GBP": float("inf"), "JPY": "150"})
    assert rates == {"JPY": Decimal("150")}


def test_format_currency():
    assert format_currency(Decimal("1234.5"), "USD") == "$1,234.50 USD"
    assert format_currency(Decimal("-3"), "EUR") == "-€3.00 EUR"
    assert format_currency(Decimal("1500"), "JPY") == "¥1,500 JPY"


def test_currency_symbol_fallback():
    assert currency_symbol("GBP") == "£"
    assert currency_symbol("MXN") == "$"
