"""dvrandao.core.pcg

PCG32 bit mixer: 64-bit state advance and the XSH-RR 32-bit output function.

These are the load-bearing primitives of the whole generator. They must give
identical results on every platform, so every intermediate is masked to its
word width explicitly.
"""

from __future__ import annotations

PCG32_MULTIPLIER = 6364136223846793005
PCG32_INCREMENT = 1442695040888963407

# XSH-RR constants for 64-bit state / 32-bit output.
PCG32_ROTATE = 59  # 64 - 5
PCG32_XSHIFT = 18  # (5 + 32) // 2
PCG32_SPARE = 27  # 64 - 32 - 5

UINT32_MASK = 0xFFFFFFFF
UINT64_MASK = 0xFFFFFFFFFFFFFFFF


def rotate_right_32(value: int, bitcount: int) -> int:
    """Word rotate in the verifier's convention: bits move toward the high end.

    The name is kept from the on-chain code, whose output every draw must
    match bit for bit.
    """
    v = value & UINT32_MASK
    n = bitcount & 31
    if n == 0:
        return v
    return ((v << n) & UINT32_MASK) | (v >> (32 - n))


def rotate_right_64(value: int, bitcount: int) -> int:
    v = value & UINT64_MASK
    n = bitcount & 63
    if n == 0:
        return v
    return ((v << n) & UINT64_MASK) | (v >> (64 - n))


def advance_state(state: int) -> int:
    return (state * PCG32_MULTIPLIER + PCG32_INCREMENT) & UINT64_MASK


def rng_value(state: int) -> int:
    """XSH-RR output for an already advanced state."""
    state &= UINT64_MASK
    rot = state >> PCG32_ROTATE
    xsh = (((state >> PCG32_XSHIFT) ^ state) >> PCG32_SPARE) & UINT32_MASK
    return rotate_right_32(xsh, rot)
