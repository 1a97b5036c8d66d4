import pytest

from perp_orders.core.errors import OutOfRangeError, ValidationError
from perp_orders.core.utils.fixed_point import (
    MAX_SAFE_LOTS,
    accepts_input,
    decimal_to_lots,
    is_valid_lots,
    lots_to_decimal,
    normalize_decimal,
)


@pytest.mark.parametrize(
    "text, lots",
    [
        ("1.5", 1_500_000),
        ("3245.67", 3_245_670_000),
        ("0", 0),
        ("0.000001", 1),
        (".5", 500_000),
        ("7.", 7_000_000),
        (" 2.25 ", 2_250_000),
    ],
)
def test_decimal_to_lots(text, lots):
    assert decimal_to_lots(text) == lots


def test_rounds_half_up_at_six_digits():
    assert decimal_to_lots("0.0000005") == 1
    assert decimal_to_lots("0.0000004") == 0
    assert decimal_to_lots("1.2345675") == 1_234_568


@pytest.mark.parametrize("text", ["", ".", "   ", "-", "abc", "1e3", "1,000", "+1", "1.2.3", "NaN"])
def test_rejects_non_numbers(text):
    with pytest.raises(ValidationError):
        decimal_to_lots(text)


@pytest.mark.parametrize("text", ["-1", "-0.0000001", "-0.0000005", "-.5"])
def test_rejects_negative(text):
    with pytest.raises(OutOfRangeError):
        decimal_to_lots(text)


def test_negative_zero_is_zero():
    assert decimal_to_lots("-0") == 0
    assert decimal_to_lots("-0.000") == 0


def test_rejects_above_max_safe():
    max_text = lots_to_decimal(MAX_SAFE_LOTS)
    assert decimal_to_lots(max_text) == MAX_SAFE_LOTS

    with pytest.raises(OutOfRangeError):
        decimal_to_lots("9007199254.740992")
    # 13 digits passes the UI guard but not the codec
    assert accepts_input("9999999999999")
    with pytest.raises(OutOfRangeError):
        decimal_to_lots("9999999999999")


def test_non_string_input_rejected():
    with pytest.raises(ValidationError):
        decimal_to_lots(1.5)


@pytest.mark.parametrize("lots, text", [(1_500_000, "1.5"), (0, "0"), (1, "0.000001"), (3_245_670_000, "3245.67"), (42_000_000, "42")])
def test_lots_to_decimal(lots, text):
    assert lots_to_decimal(lots) == text


@pytest.mark.parametrize("bad", [-1, MAX_SAFE_LOTS + 1])
def test_lots_to_decimal_range(bad):
    with pytest.raises(OutOfRangeError):
        lots_to_decimal(bad)


@pytest.mark.parametrize("bad", [True, 1.0, "100"])
def test_lots_to_decimal_requires_int(bad):
    with pytest.raises(ValidationError):
        lots_to_decimal(bad)


@pytest.mark.parametrize("text", ["1.5", "0.000001", "123456.123456", "3245.67", "0", "1000000"])
def test_round_trip_reproduces_canonical_input(text):
    assert lots_to_decimal(decimal_to_lots(text)) == text


def test_normalize_decimal():
    assert normalize_decimal("01.500") == "1.5"
    assert normalize_decimal("2.") == "2"


def test_accepts_input_guard():
    assert accepts_input("")
    assert accepts_input(".")
    assert accepts_input("12.5")
    assert not accepts_input("1a")
    assert not accepts_input("-1")
    assert not accepts_input("12345678901234")


def test_is_valid_lots():
    assert is_valid_lots(0)
    assert is_valid_lots(MAX_SAFE_LOTS)
    assert not is_valid_lots(-1)
    assert not is_valid_lots(True)
    assert not is_valid_lots(1.0)
