from decimal import Decimal

import pytest

from currencies.units import BaseUnit, parse_amount, to_atomic, to_hex_quantity


def test_parse_amount_accepts_exact_types():
    assert parse_amount(10) == 10
    assert parse_amount("115792089237316195423570985008687907853269984665640564039457584007913129639935") == 2**256 - 1
    assert parse_amount("0x64") == 100
    assert parse_amount(Decimal("1E+3")) == 1000


def test_parse_amount_rejects_floats_and_fractions():
    with pytest.raises(TypeError):
        parse_amount(1.0)
    with pytest.raises(TypeError):
        parse_amount(True)
    with pytest.raises(ValueError):
        parse_amount("1.5")
    with pytest.raises(ValueError):
        parse_amount(Decimal("0.1"))
    with pytest.raises(ValueError):
        parse_amount(-1)
    with pytest.raises(ValueError):
        parse_amount("abc")


def test_to_hex_quantity():
    assert to_hex_quantity(255) == "0xff"
    assert to_hex_quantity("100") == "0x64"


def test_to_atomic_is_exact():
    assert to_atomic("1.5", 6) == 1_500_000
    assert to_atomic("123456789012345678901234567890.123456789012345678", 18) == (
        123456789012345678901234567890 * 10**18 + 123456789012345678
    )
    assert to_atomic("0.0000001", 6) == 0  # truncates below the base unit


def test_to_atomic_rejects_bad_input():
    with pytest.raises(TypeError):
        to_atomic(0.1, 18)
    with pytest.raises(ValueError):
        to_atomic("0", 18)
    with pytest.raises(ValueError):
        to_atomic("1", 256)


def test_base_unit_from_decimals():
    assert BaseUnit.from_decimals("wei", 6) == BaseUnit("wei", 10**6)
    with pytest.raises(ValueError):
        BaseUnit.from_decimals("wei", -1)
