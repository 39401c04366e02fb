"""Tests for amount parsing."""

from decimal import Decimal

import pytest

from pnlkit.utils.amount_parser import parse_amount, to_decimal


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", "123.45"),
        ("-300", "-300"),
        ("-123,45", "-123.45"),
        ("1.234,56", "1234.56"),
        ("-1.234,56", "-1234.56"),
        ("1,234.56", "1234.56"),
        ("1,234,567", "1234567"),
        ("1.234.567", "1234567"),
        ("(300,00)", "-300.00"),
        ("(1,234.50)", "-1234.50"),
        ("€ 12,50", "12.50"),
        ("EUR 10", "10"),
        ("  42  ", "42"),
    ],
)
def test_parse_amount_notations(text, expected):
    """European and US notations parse to the same Decimal."""
    assert parse_amount(text) == Decimal(expected)


def test_parse_amount_lone_comma_is_decimal_separator():
    """A single comma group is read as a decimal comma."""
    assert parse_amount("1,234") == Decimal("1.234")


@pytest.mark.parametrize("text", ["", "   ", "abc", "12abc", "NaN", "Infinity"])
def test_parse_amount_invalid(text):
    """Unparseable or non-finite amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(text)


def test_to_decimal_from_float_uses_string_form():
    """Floats are converted without binary expansion."""
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(0.1) + to_decimal(0.2) == Decimal("0.3")


def test_to_decimal_passthrough_and_int():
    """Decimals are returned unchanged and ints converted."""
    value = Decimal("1.50")
    assert to_decimal(value) is value
    assert to_decimal(-7) == Decimal("-7")
    assert to_decimal("1.234,50") == Decimal("1234.50")


@pytest.mark.parametrize("value", [True, None, object()])
def test_to_decimal_rejects_non_numbers(value):
    """Booleans and other objects are not amounts."""
    with pytest.raises(ValueError):
        to_decimal(value)
