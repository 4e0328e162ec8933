import math
import struct

import pytest

from fieldkit.numbers import (
    FloatFormat,
    FloatParts,
    decompose_float,
    forge_float,
    make_float,
    negative_powers_of_ten,
    normalize,
    parse_number,
    positive_powers_of_ten,
)


def _is_float32(value):
    return struct.unpack("<f", struct.pack("<f", value))[0] == value


def test_forge_float_double_pattern():
    assert forge_float(0x4024000000000000) == 1e1


def test_forge_float_single_pattern():
    assert forge_float(0x41200000, FloatFormat.FLOAT32) == 1e1


def test_forge_float_nan_and_inf():
    assert math.isnan(forge_float(0x7FF8000000000000))
    assert forge_float(0x7FF0000000000000) == math.inf
    assert math.isnan(FloatFormat.FLOAT64.nan)
    assert FloatFormat.FLOAT32.inf == math.inf


def test_forge_float_rejects_oversized_bits():
    with pytest.raises(ValueError):
        forge_float(1 << 32, FloatFormat.FLOAT32)


def test_highest_and_lowest_are_symmetric():
    assert forge_float(0x7FEFFFFFFFFFFFFF) == FloatFormat.FLOAT64.highest
    assert forge_float(0xFFEFFFFFFFFFFFFF) == FloatFormat.FLOAT64.lowest
    assert forge_float(0x7F7FFFFF, FloatFormat.FLOAT32) == FloatFormat.FLOAT32.highest
    assert forge_float(0xFF7FFFFF, FloatFormat.FLOAT32) == FloatFormat.FLOAT32.lowest
    for fmt in FloatFormat:
        assert fmt.lowest == -fmt.highest
        assert math.isfinite(fmt.highest)


def test_highest_for_unknown_size():
    with pytest.raises(ValueError):
        FloatFormat.FLOAT64.highest_for(True, 4)


def test_positive_powers_of_ten_double():
    assert positive_powers_of_ten() == (1e1, 1e2, 1e4, 1e8, 1e16, 1e32, 1e64, 1e128, 1e256)


def test_negative_powers_of_ten_double():
    assert negative_powers_of_ten() == (
        1e-1, 1e-2, 1e-4, 1e-8, 1e-16, 1e-32, 1e-64, 1e-128, 1e-256,
    )


@pytest.mark.parametrize("fmt", list(FloatFormat))
def test_power_tables_match(fmt):
    positive = positive_powers_of_ten(fmt)
    negative = negative_powers_of_ten(fmt)
    assert len(positive) == len(negative)
    for j, (p, q) in enumerate(zip(positive, negative)):
        assert p == pytest.approx(float(f"1e{2 ** j}"), rel=1e-6)
        assert q == pytest.approx(float(f"1e-{2 ** j}"), rel=1e-6)


def test_make_float_zero_exponent_is_identity():
    assert make_float(5.0, 0) == 5.0


@pytest.mark.parametrize("j", range(9))
def test_make_float_single_power(j):
    assert make_float(1.0, 2 ** j) == positive_powers_of_ten()[j]
    assert make_float(1.0, -(2 ** j)) == negative_powers_of_ten()[j]


@pytest.mark.parametrize("mantissa,exponent", [(3, 5), (123456, -3), (7, 300), (42, -300), (1, 22)])
def test_make_float_matches_decimal(mantissa, exponent):
    expected = float(f"{mantissa}e{exponent}")
    assert make_float(float(mantissa), exponent) == pytest.approx(expected, rel=1e-14)


def test_make_float_beyond_table_saturates():
    assert make_float(1.0, 600) == math.inf
    assert make_float(-1.0, 600) == -math.inf
    assert make_float(1.0, -600) == 0.0


def test_make_float_single_precision_rounds():
    result = make_float(3.0, 7, FloatFormat.FLOAT32)
    assert _is_float32(result)
    assert result == pytest.approx(3e7, rel=1e-6)


@pytest.mark.parametrize("value", [1e20, 3.5e100, 9.99e300, 1.25e7])
def test_normalize_large_values(value):
    scaled, power = normalize(value)
    assert 1 <= scaled < 10
    assert scaled * 10.0 ** power == pytest.approx(value, rel=1e-12)
    assert power > 0


@pytest.mark.parametrize("value", [1e-10, 4.2e-200, 2.5e-6])
def test_normalize_small_values(value):
    scaled, power = normalize(value)
    assert 1 <= scaled < 10
    assert power < 0
    assert scaled == pytest.approx(value * 10.0 ** -power, rel=1e-12)


@pytest.mark.parametrize("value", [0.0, 1.0, 123.456, 0.5])
def test_normalize_leaves_moderate_values(value):
    assert normalize(value) == (value, 0)


def test_normalize_single_precision():
    scaled, power = normalize(1e20, FloatFormat.FLOAT32)
    assert _is_float32(scaled)
    assert 1 <= scaled < 10
    assert power == 20


def _reconstruct(parts: FloatParts) -> float:
    return (parts.integral + parts.decimal / 10 ** parts.decimal_places) * 10.0 ** parts.exponent


@pytest.mark.parametrize(
    "value", [0.0, 1.5, 123.456, 3.14159, 1e20, 2.5e-8, 9.9999999999, 9.9999999999e20, 1234567.0]
)
def test_decompose_reconstructs(value):
    parts = decompose_float(value)
    assert _reconstruct(parts) == pytest.approx(value, rel=1e-8)
    assert parts.decimal_places >= 0
    if parts.decimal_places > 0:
        assert parts.decimal % 10 != 0
    if parts.exponent:
        assert 1 <= parts.integral < 10


def test_decompose_rounding_carries_into_exponent():
    parts = decompose_float(9.9999999999e20)
    assert parts.integral == 1
    assert parts.decimal == 0


def test_decompose_single_precision():
    parts = decompose_float(1.5, FloatFormat.FLOAT32)
    assert _reconstruct(parts) == 1.5
    assert parts.decimal_places <= 6


@pytest.mark.parametrize("value", [-1.0, math.nan, math.inf])
def test_decompose_rejects_bad_values(value):
    with pytest.raises(ValueError):
        decompose_float(value)


@pytest.mark.parametrize("text", ["0", "123", "-42", "+7", "-0"])
def test_parse_integers(text):
    result = parse_number(text)
    assert isinstance(result, int)
    assert result == int(text)


def test_parse_uint64_max():
    assert parse_number(str(2 ** 64 - 1)) == 2 ** 64 - 1


def test_parse_int64_min():
    assert parse_number(str(-(2 ** 63))) == -(2 ** 63)


def test_parse_below_int64_min_is_float():
    result = parse_number(str(-(2 ** 63) - 1))
    assert isinstance(result, float)
    assert result == pytest.approx(-(2.0 ** 63), rel=1e-12)


@pytest.mark.parametrize("text", ["3.14", "-2.5", "1e10", "1.5E-3", ".5", "6.02e+23", "123456789012345678901234"])
def test_parse_floats(text):
    result = parse_number(text)
    assert isinstance(result, float)
    assert result == pytest.approx(float(text), rel=1e-14)


def test_parse_exponent_overflow():
    assert parse_number("1e309") == math.inf
    assert parse_number("-1e999") == -math.inf


def test_parse_exponent_underflow():
    result = parse_number("-1e-400")
    assert result == 0.0
    assert math.copysign(1.0, result) == -1.0


@pytest.mark.parametrize("text", ["", "-", "abc", "12x", "1.5.5", "1e5z", "nan", "Infinity"])
def test_parse_invalid(text):
    with pytest.raises(ValueError):
        parse_number(text)


def test_parse_nan_when_enabled():
    result = parse_number("NaN", enable_nan=True)
    assert str(result) == "nan"
    assert str(parse_number("nan", enable_nan=True)) == "nan"


def test_parse_infinity_when_enabled():
    assert parse_number("Infinity", enable_infinity=True) == math.inf
    assert parse_number("-infinity", enable_infinity=True) == -math.inf