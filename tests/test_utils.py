from decimal import Decimal

import pytest

from evenly.core.utils import (
    currency_exponent,
    currency_symbol,
    from_minor_units,
    to_minor_units,
)


@pytest.mark.parametrize(
    "amount, exponent, expected",
    [
        (Decimal("12.34"), 2, 1234),
        ("-0.01", 2, -1),
        (100, 2, 10000),
        (Decimal("0.005"), 2, 1),
        (Decimal("-0.005"), 2, -1),
        (Decimal("1500"), 0, 1500),
        (Decimal("1.2345"), 3, 1235),
    ],
)
def test_to_minor_units(amount, exponent, expected):
    assert to_minor_units(amount, exponent) == expected


def test_to_minor_units_rejects_float():
    with pytest.raises(TypeError):
        to_minor_units(0.1)


def test_from_minor_units_keeps_currency_precision():
    assert str(from_minor_units(1234)) == "12.34"
    assert str(from_minor_units(-5)) == "-0.05"
    assert str(from_minor_units(0)) == "0.00"
    assert str(from_minor_units(1500, 0)) == "1500"
    assert str(from_minor_units(1, 3)) == "0.001"


def test_currency_exponent():
    assert currency_exponent("INR") == 2
    assert currency_exponent("jpy") == 0
    assert currency_exponent("KWD") == 3
    assert currency_exponent(None) == 2


def test_currency_symbol_falls_back_to_code():
    assert currency_symbol("INR") == "₹"
    assert currency_symbol("CHF") == "CHF "
