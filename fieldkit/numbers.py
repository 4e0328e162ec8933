"""Number parsing, decimal decomposition and power-of-ten scaling.

Floating-point work is done in either single or double precision. Single
precision is emulated by rounding every intermediate result to the nearest
IEEE-754 binary32 value, so results match a device that computes in
``float``.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from enum import Enum

VERSION = "6.21.5"
VERSION_MAJOR = 6
VERSION_MINOR = 21
VERSION_REVISION = 5

DEFAULT_NESTING_LIMIT = 10
POSITIVE_EXPONENTIATION_THRESHOLD = 1e7
NEGATIVE_EXPONENTIATION_THRESHOLD = 1e-5
TAB = "  "
STRING_BUFFER_SIZE = 32
DECODE_UNICODE = True
ENABLE_COMMENTS = False
ENABLE_NAN = False
ENABLE_INFINITY = False

INTEGER_MIN = -(1 << 63)
INTEGER_MAX = (1 << 63) - 1
UINT_MAX = (1 << 64) - 1

_DIGITS = frozenset("0123456789")


class FloatFormat(Enum):
    """A binary floating-point format, named by its size in bytes."""

    FLOAT32 = 4
    FLOAT64 = 8

    @property
    def mantissa_bits(self) -> int:
        return 23 if self is FloatFormat.FLOAT32 else 52

    @property
    def mantissa_max(self) -> int:
        return (1 << self.mantissa_bits) - 1

    @property
    def exponent_max(self) -> int:
        return 38 if self is FloatFormat.FLOAT32 else 308

    @property
    def struct_code(self) -> str:
        return "<f" if self is FloatFormat.FLOAT32 else "<d"

    @property
    def nan(self) -> float:
        return forge_float(_SPECIAL_BITS[self]["nan"], self)

    @property
    def inf(self) -> float:
        return forge_float(_SPECIAL_BITS[self]["inf"], self)

    @property
    def highest(self) -> float:
        return forge_float(_SPECIAL_BITS[self]["highest"], self)

    @property
    def lowest(self) -> float:
        return forge_float(_SPECIAL_BITS[self]["lowest"], self)

    def highest_for(self, signed: bool, size: int) -> float:
        """Largest value of this format that fits an integer of ``size`` bytes."""
        try:
            bits = _HIGHEST_FOR_BITS[self][(signed, size)]
        except KeyError:
            raise ValueError(
                f"no bound for a {size}-byte {'signed' if signed else 'unsigned'} integer"
            ) from None
        return forge_float(bits, self)


_SPECIAL_BITS = {
    FloatFormat.FLOAT64: {
        "nan": 0x7FF8000000000000,
        "inf": 0x7FF0000000000000,
        "highest": 0x7FEFFFFFFFFFFFFF,
        "lowest": 0xFFEFFFFFFFFFFFFF,
    },
    FloatFormat.FLOAT32: {
        "nan": 0x7FC00000,
        "inf": 0x7F800000,
        "highest": 0x7F7FFFFF,
        "lowest": 0xFF7FFFFF,
    },
}

_HIGHEST_FOR_BITS = {
    FloatFormat.FLOAT64: {
        (True, 8): 0x43DFFFFFFFFFFFFF,
        (False, 8): 0x43EFFFFFFFFFFFFF,
    },
    FloatFormat.FLOAT32: {
        (True, 4): 0x4EFFFFFF,
        (False, 4): 0x4F7FFFFF,
        (True, 8): 0x5EFFFFFF,
        (False, 8): 0x5F7FFFFF,
    },
}

_POSITIVE_POWER_BITS = {
    FloatFormat.FLOAT64: (
        0x4024000000000000,  # 1e1
        0x4059000000000000,  # 1e2
        0x40C3880000000000,  # 1e4
        0x4197D78400000000,  # 1e8
        0x4341C37937E08000,  # 1e16
        0x4693B8B5B5056E17,  # 1e32
        0x4D384F03E93FF9F5,  # 1e64
        0x5A827748F9301D32,  # 1e128
        0x75154FDD7F73BF3C,  # 1e256
    ),
    FloatFormat.FLOAT32: (
        0x41200000,  # 1e1f
        0x42C80000,  # 1e2f
        0x461C4000,  # 1e4f
        0x4CBEBC20,  # 1e8f
        0x5A0E1BCA,  # 1e16f
        0x749DC5AE,  # 1e32f
    ),
}

_NEGATIVE_POWER_BITS = {
    FloatFormat.FLOAT64: (
        0x3FB999999999999A,  # 1e-1
        0x3F847AE147AE147B,  # 1e-2
        0x3F1A36E2EB1C432D,  # 1e-4
        0x3E45798EE2308C3A,  # 1e-8
        0x3C9CD2B297D889BC,  # 1e-16
        0x3949F623D5A8A733,  # 1e-32
        0x32A50FFD44F4A73D,  # 1e-64
        0x255BBA08CF8C979D,  # 1e-128
        0x0AC8062864AC6F43,  # 1e-256
    ),
    FloatFormat.FLOAT32: (
        0x3DCCCCCD,  # 1e-1f
        0x3C23D70A,  # 1e-2f
        0x38D1B717,  # 1e-4f
        0x322BCC77,  # 1e-8f
        0x24E69595,  # 1e-16f
        0x0A4FB11F,  # 1e-32f
    ),
}


def _round(value: float, fmt: FloatFormat) -> float:
    """Round ``value`` to the nearest number representable in ``fmt``."""
    value = float(value)
    if fmt is FloatFormat.FLOAT64 or math.isnan(value) or math.isinf(value):
        return value
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def forge_float(bits: int, fmt: FloatFormat = FloatFormat.FLOAT64) -> float:
    """Build a float from its binary representation."""
    size = fmt.value
    if not 0 <= bits < 1 << (8 * size):
        raise ValueError(f"bit pattern does not fit in {size} bytes")
    return struct.unpack(fmt.struct_code, bits.to_bytes(size, "little"))[0]


def positive_powers_of_ten(fmt: FloatFormat = FloatFormat.FLOAT64) -> tuple[float, ...]:
    """Return 1e1, 1e2, 1e4, 1e8, ... up to the largest the format holds."""
    return tuple(forge_float(bits, fmt) for bits in _POSITIVE_POWER_BITS[fmt])


def negative_powers_of_ten(fmt: FloatFormat = FloatFormat.FLOAT64) -> tuple[float, ...]:
    """Return 1e-1, 1e-2, 1e-4, 1e-8, ... down to the smallest in the table."""
    return tuple(forge_float(bits, fmt) for bits in _NEGATIVE_POWER_BITS[fmt])


def make_float(mantissa: float, exponent: int, fmt: FloatFormat = FloatFormat.FLOAT64) -> float:
    """Return ``mantissa * 10**exponent`` computed by binary powers of ten.

    Exponents too large for the power table saturate to infinity (positive
    exponent) or zero (negative exponent), as the result cannot be finite
    and non-zero in either format.
    """
    m = _round(mantissa, fmt)
    powers = positive_powers_of_ten(fmt) if exponent > 0 else negative_powers_of_ten(fmt)
    e = abs(exponent)
    for power in powers:
        if e == 0:
            break
        if e & 1:
            m = _round(m * power, fmt)
        e >>= 1
    if e:
        if m == 0 or math.isnan(m):
            return m
        return math.copysign(math.inf, m) if exponent > 0 else math.copysign(0.0, m)
    return m


def normalize(value: float, fmt: FloatFormat = FloatFormat.FLOAT64) -> tuple[float, int]:
    """Scale very large or very small values towards [1, 10).

    Returns the scaled value and the power of ten that was taken out.
    """
    positive = positive_powers_of_ten(fmt)
    negative = negative_powers_of_ten(fmt)
    value = _round(value, fmt)
    powers_of_10 = 0
    index = len(positive) - 1
    bit = 1 << index

    if value >= POSITIVE_EXPONENTIATION_THRESHOLD:
        while index >= 0:
            if value >= positive[index]:
                value = _round(value * negative[index], fmt)
                powers_of_10 += bit
            bit >>= 1
            index -= 1

    if 0 < value <= NEGATIVE_EXPONENTIATION_THRESHOLD:
        while index >= 0:
            if value < _round(negative[index] * 10, fmt):
                value = _round(value * positive[index], fmt)
                powers_of_10 -= bit
            bit >>= 1
            index -= 1

    return value, powers_of_10


@dataclass(frozen=True)
class FloatParts:
    """A positive float split into the pieces needed to print it.

    The value is ``(integral + decimal / 10**decimal_places) * 10**exponent``.
    """

    integral: int
    decimal: int
    exponent: int
    decimal_places: int


def decompose_float(value: float, fmt: FloatFormat = FloatFormat.FLOAT64) -> FloatParts:
    """Split a finite, non-negative float into printable parts."""
    if math.isnan(value) or math.isinf(value):
        raise ValueError("cannot decompose a non-finite value")
    if value < 0:
        raise ValueError("cannot decompose a negative value")

    if fmt is FloatFormat.FLOAT64:
        max_decimal_part, decimal_places = 1_000_000_000, 9
    else:
        max_decimal_part, decimal_places = 1_000_000, 6

    value, exponent = normalize(value, fmt)
    integral = int(value)

    tmp = integral
    while tmp >= 10:
        max_decimal_part //= 10
        decimal_places -= 1
        tmp //= 10

    remainder = _round(_round(value - integral, fmt) * max_decimal_part, fmt)
    decimal = int(remainder)
    remainder = _round(remainder - decimal, fmt)

    decimal += int(_round(remainder * 2, fmt))
    if decimal >= max_decimal_part:
        decimal = 0
        integral += 1
        if exponent and integral >= 10:
            exponent += 1
            integral = 1

    while decimal % 10 == 0 and decimal_places > 0:
        decimal //= 10
        decimal_places -= 1

    return FloatParts(integral, decimal, exponent, decimal_places)


def parse_number(
    text: str,
    enable_nan: bool = ENABLE_NAN,
    enable_infinity: bool = ENABLE_INFINITY,
) -> int | float:
    """Parse a JSON number.

    Integers that fit a 64-bit signed (negative) or unsigned (positive)
    integer are returned as ``int``; anything else as ``float``. Raises
    ValueError if the text is not a number.
    """
    fmt = FloatFormat.FLOAT64
    n = len(text)

    def at(k: int) -> str:
        return text[k] if k < n else ""

    i = 0
    is_negative = False
    if at(0) == "-":
        is_negative = True
        i = 1
    elif at(0) == "+":
        i = 1

    c = at(i)
    if enable_nan and c in ("n", "N"):
        return fmt.nan
    if enable_infinity and c in ("i", "I"):
        return -fmt.inf if is_negative else fmt.inf

    if c not in _DIGITS and c != ".":
        raise ValueError(f"not a number: {text!r}")

    mantissa = 0
    exponent_offset = 0

    while at(i) in _DIGITS:
        digit = ord(text[i]) - ord("0")
        if mantissa > UINT_MAX // 10:
            break
        mantissa *= 10
        if mantissa > UINT_MAX - digit:
            break
        mantissa += digit
        i += 1

    if i >= n:
        if is_negative:
            if mantissa <= 1 << 63:
                return -mantissa
        else:
            return mantissa

    while mantissa > fmt.mantissa_max:
        mantissa //= 10
        exponent_offset += 1

    while at(i) in _DIGITS:
        exponent_offset += 1
        i += 1

    if at(i) == ".":
        i += 1
        while at(i) in _DIGITS:
            if mantissa < fmt.mantissa_max // 10:
                mantissa = mantissa * 10 + ord(text[i]) - ord("0")
                exponent_offset -= 1
            i += 1

    exponent = 0
    if at(i) in ("e", "E"):
        i += 1
        negative_exponent = False
        if at(i) == "-":
            negative_exponent = True
            i += 1
        elif at(i) == "+":
            i += 1

        while at(i) in _DIGITS:
            exponent = exponent * 10 + ord(text[i]) - ord("0")
            if exponent + exponent_offset > fmt.exponent_max:
                if negative_exponent:
                    return -0.0 if is_negative else 0.0
                return -fmt.inf if is_negative else fmt.inf
            i += 1
        if negative_exponent:
            exponent = -exponent
    exponent += exponent_offset

    if i != n:
        raise ValueError(f"not a number: {text!r}")

    result = make_float(float(mantissa), exponent, fmt)
    return -result if is_negative else result