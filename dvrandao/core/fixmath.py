"""dvrandao.core.fixmath

Signed Q32.32 fixed-point arithmetic.

Values are plain ints holding a signed 64-bit word interpreted as value/2^32.
Every operation wraps with two's complement semantics, exactly like the
on-chain verifier. Nothing here raises.
"""

from __future__ import annotations

FRACBITS = 32
ONE = 1 << FRACBITS

# Returned by div() when the divisor is zero.
NAN = -0x7FFFFFFFFFFFFFFF

_MASK64 = (1 << 64) - 1
_SIGN64 = 1 << 63


def wrap64(value: int) -> int:
    """Normalise an arbitrary int into the signed 64-bit range."""
    value &= _MASK64
    if value & _SIGN64:
        value -= 1 << 64
    return value


def from_int(n: int) -> int:
    return wrap64(n << FRACBITS)


def add(a: int, b: int) -> int:
    return wrap64(a + b)


def sub(a: int, b: int) -> int:
    return wrap64(a - b)


def mul(a: int, b: int) -> int:
    """Multiply two Q32.32 values.

    The intermediate product keeps full precision; the shift is arithmetic so
    the sign survives, then the result is truncated to 64 bits.
    """
    return wrap64((a * b) >> FRACBITS)


def div(a: int, b: int) -> int:
    """Divide two Q32.32 values, truncating toward zero.

    Division by zero is not an error: it returns ``NAN`` and callers are
    expected to check for it.
    """
    if b == 0:
        return NAN

    num = a << FRACBITS
    q = abs(num) // abs(b)
    if (num < 0) != (b < 0):
        q = -q
    return wrap64(q)


def to_float(value: int) -> float:
    """Display helper. Never feed the result back into deterministic code."""
    return value / ONE
