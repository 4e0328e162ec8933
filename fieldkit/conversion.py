"""Range-checked numeric conversion and exact three-way comparison.

Integers are compared exactly, whatever their sizes and signs. When either
side is a float, both sides are compared as binary64 values. Conversions
check that a value fits the target type and yield zero when it does not.
"""

from __future__ import annotations

import math
import struct
from enum import Enum, IntFlag
from numbers import Real

from fieldkit.numbers import FloatFormat


class CompareResult(IntFlag):
    """Outcome of a comparison; the OR_EQUAL members combine two outcomes."""

    DIFFER = 0
    EQUAL = 1
    GREATER = 2
    LESS = 4
    GREATER_OR_EQUAL = GREATER | EQUAL
    LESS_OR_EQUAL = LESS | EQUAL


class NumberType(Enum):
    """A fixed-size machine number type."""

    INT8 = ("int8", 1, True, False)
    UINT8 = ("uint8", 1, False, False)
    INT16 = ("int16", 2, True, False)
    UINT16 = ("uint16", 2, False, False)
    INT32 = ("int32", 4, True, False)
    UINT32 = ("uint32", 4, False, False)
    INT64 = ("int64", 8, True, False)
    UINT64 = ("uint64", 8, False, False)
    FLOAT32 = ("float32", 4, True, True)
    FLOAT64 = ("float64", 8, True, True)

    def __init__(self, label: str, size: int, signed: bool, is_float: bool) -> None:
        self.label = label
        self.size = size
        self.signed = signed
        self.is_float = is_float

    @property
    def float_format(self) -> FloatFormat:
        if not self.is_float:
            raise ValueError(f"{self.label} is not a floating-point type")
        return FloatFormat(self.size)

    @property
    def lowest(self) -> int | float:
        """The smallest value the type holds."""
        if self.is_float:
            return self.float_format.lowest
        return -(1 << (8 * self.size - 1)) if self.signed else 0

    @property
    def highest(self) -> int | float:
        """The largest value the type holds."""
        if self.is_float:
            return self.float_format.highest
        bits = 8 * self.size - (1 if self.signed else 0)
        return (1 << bits) - 1


def _check_number(value: object) -> None:
    if not isinstance(value, Real):
        raise TypeError(f"{type(value).__name__} is not a number")


def arithmetic_compare(lhs: int | float, rhs: int | float) -> CompareResult:
    """Compare two numbers.

    Returns LESS, GREATER or EQUAL. When a float is involved both sides are
    taken as binary64 values; a NaN on either side compares EQUAL because
    neither ordering test succeeds.
    """
    _check_number(lhs)
    _check_number(rhs)
    if isinstance(lhs, float) or isinstance(rhs, float):
        lhs, rhs = float(lhs), float(rhs)
    else:
        lhs, rhs = int(lhs), int(rhs)
    if lhs < rhs:
        return CompareResult.LESS
    if lhs > rhs:
        return CompareResult.GREATER
    return CompareResult.EQUAL


def can_convert_number(value: int | float, target: NumberType) -> bool:
    """Return True if ``value`` fits in ``target`` without wrapping."""
    _check_number(value)
    target = NumberType(target)
    if target.is_float:
        return True
    if not isinstance(value, float):
        return target.lowest <= int(value) <= target.highest
    if math.isnan(value):
        return False
    if target.size < FloatFormat.FLOAT64.value:
        return target.lowest <= value <= target.highest
    upper = FloatFormat.FLOAT64.highest_for(target.signed, target.size)
    return value >= target.lowest and value <= upper


def _to_float32(value: float) -> float:
    if math.isnan(value) or math.isinf(value):
        return value
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def convert_number(value: int | float, target: NumberType) -> int | float:
    """Convert ``value`` to ``target``, or return zero if it does not fit.

    Floats converted to an integer type are truncated towards zero; values
    converted to float32 are rounded to the nearest binary32 value.
    """
    target = NumberType(target)
    if not can_convert_number(value, target):
        return 0
    if target is NumberType.FLOAT32:
        return _to_float32(float(value))
    if target is NumberType.FLOAT64:
        return float(value)
    return int(value)