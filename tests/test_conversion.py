import math

import pytest

from fieldkit.conversion import (
    CompareResult,
    NumberType,
    arithmetic_compare,
    can_convert_number,
    convert_number,
)
from fieldkit.numbers import FloatFormat, forge_float, negative_powers_of_ten


def test_compare_integers():
    assert arithmetic_compare(1, 2) is CompareResult.LESS
    assert arithmetic_compare(2, 1) is CompareResult.GREATER
    assert arithmetic_compare(5, 5) is CompareResult.EQUAL


def test_compare_signed_against_large_unsigned_is_exact():
    assert arithmetic_compare(-1, (1 << 64) - 1) is CompareResult.LESS
    assert arithmetic_compare((1 << 64) - 1, -1) is CompareResult.GREATER


def test_compare_with_float_uses_binary64():
    assert arithmetic_compare(2**53 + 1, float(2**53)) is CompareResult.EQUAL
    assert arithmetic_compare(1, 1.5) is CompareResult.LESS


def test_compare_nan_reports_equal():
    assert arithmetic_compare(math.nan, 1.0) is CompareResult.EQUAL


def test_or_equal_flags_contain_components():
    result = arithmetic_compare(3, 2)
    assert (result & CompareResult.GREATER_OR_EQUAL) == CompareResult.GREATER
    assert (result & CompareResult.LESS_OR_EQUAL) == CompareResult.DIFFER
    equal = arithmetic_compare(2, 2)
    assert (equal & CompareResult.LESS_OR_EQUAL) == CompareResult.EQUAL


def test_compare_rejects_non_numbers():
    with pytest.raises(TypeError):
        arithmetic_compare("1", 2)


@pytest.mark.parametrize("target", [t for t in NumberType if not t.is_float])
def test_integer_bounds_are_convertible(target):
    assert can_convert_number(target.highest, target)
    assert can_convert_number(target.lowest, target)
    assert not can_convert_number(target.highest + 1, target)
    assert not can_convert_number(target.lowest - 1, target)


def test_negative_to_unsigned_fails():
    assert not can_convert_number(-1, NumberType.UINT32)
    assert convert_number(-1, NumberType.UINT32) == 0


def test_out_of_range_converts_to_zero():
    assert convert_number(300, NumberType.UINT8) == 0
    assert convert_number(1e10, NumberType.INT32) == 0


def test_float_to_int64_upper_bound():
    assert can_convert_number(9.2233720368547748e18, NumberType.INT64)
    assert not can_convert_number(2.0**63, NumberType.INT64)
    assert can_convert_number(1.8446744073709549568e19, NumberType.UINT64)
    assert not can_convert_number(2.0**64, NumberType.UINT64)


def test_nan_does_not_convert_to_integer():
    assert not can_convert_number(math.nan, NumberType.INT16)


def test_float_truncates_toward_zero():
    assert convert_number(3.7, NumberType.INT32) == 3
    assert convert_number(-3.7, NumberType.INT32) == -3


def test_integer_always_converts_to_float():
    assert can_convert_number((1 << 64) - 1, NumberType.FLOAT32)
    assert convert_number(7, NumberType.FLOAT64) == 7.0


def test_float32_rounding():
    expected = negative_powers_of_ten(FloatFormat.FLOAT32)[0]
    assert convert_number(0.1, NumberType.FLOAT32) == expected


def test_float_type_bounds_come_from_format():
    assert NumberType.FLOAT64.highest == forge_float(0x7FEFFFFFFFFFFFFF)
    assert NumberType.FLOAT32.lowest == forge_float(0xFF7FFFFF, FloatFormat.FLOAT32)