"""dvrandao.core.hashchain

Hash-chained random generator over a 256-bit seed.

Each draw runs four PCG32 lanes (one per 64-bit seed word), two advances per
lane. The eight 32-bit mixer outputs are hashed with Keccak-256 to give the
public random value; the final lane states, permuted, become the next seed.

Lane permutation (load-bearing, do not "fix"):
  s0 -> word 3, s1 -> word 2, s2 -> word 0, s3 -> word 1
"""

from __future__ import annotations

import struct
from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple

from dvrandao.core.pcg import UINT64_MASK, advance_state, rng_value

SEED_BITS = 256
SEED_MAX = (1 << SEED_BITS) - 1


def keccak256(data: bytes) -> bytes:
    # hashlib.sha3_256 is NOT keccak256.
    try:
        from eth_utils.crypto import keccak
    except Exception as e:  # pragma: no cover
        raise RuntimeError("dvrandao requires eth-utils with an eth-hash backend (pip install 'eth-hash[pycryptodome]')") from e
    return keccak(data)


@dataclass(frozen=True, slots=True)
class Seed256:
    """256-bit RNG state as four unsigned 64-bit limbs, little-endian composed."""

    s0: int
    s1: int
    s2: int
    s3: int

    def __post_init__(self) -> None:
        for name in ("s0", "s1", "s2", "s3"):
            v = getattr(self, name)
            if not 0 <= v <= UINT64_MASK:
                raise ValueError(f"seed word {name} out of 64-bit range: {v}")

    @classmethod
    def from_int(cls, value: int) -> Seed256:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"seed must be an int, got {type(value).__name__}")
        if not 0 <= value <= SEED_MAX:
            raise ValueError(f"seed out of 256-bit range: {value}")
        return cls(
            value & UINT64_MASK,
            (value >> 64) & UINT64_MASK,
            (value >> 128) & UINT64_MASK,
            (value >> 192) & UINT64_MASK,
        )

    @property
    def words(self) -> tuple[int, int, int, int]:
        return (self.s0, self.s1, self.s2, self.s3)

    def to_int(self) -> int:
        return self.s0 | (self.s1 << 64) | (self.s2 << 128) | (self.s3 << 192)

    def __int__(self) -> int:
        return self.to_int()


class ChainStep(NamedTuple):
    random_value: int
    next_seed: int


def _as_seed(seed: int | Seed256) -> Seed256:
    if isinstance(seed, Seed256):
        return seed
    return Seed256.from_int(seed)


def _run_lanes(seed: Seed256) -> tuple[list[int], Seed256]:
    outputs: list[int] = []
    finals: list[int] = []
    for word in seed.words:
        state = advance_state(word)
        outputs.append(rng_value(state))
        state = advance_state(state)
        outputs.append(rng_value(state))
        finals.append(state)

    lane0, lane1, lane2, lane3 = finals
    return outputs, Seed256(lane2, lane3, lane1, lane0)


def chain_words(seed: int | Seed256) -> list[int]:
    """The eight 32-bit mixer outputs fed to the hash for this seed."""
    outputs, _ = _run_lanes(_as_seed(seed))
    return outputs


def chain(seed: int | Seed256) -> ChainStep:
    """Draw one random value; returns ``(random_value, next_seed)``.

    Pure: the same seed always yields the same pair.
    """
    outputs, next_seed = _run_lanes(_as_seed(seed))
    digest = keccak256(struct.pack("<8I", *outputs))
    return ChainStep(int.from_bytes(digest, "big"), next_seed.to_int())


def iter_chain(seed: int | Seed256) -> Iterator[ChainStep]:
    """Yield successive draws, threading the seed through each step."""
    current = _as_seed(seed).to_int()
    while True:
        step = chain(current)
        yield step
        current = step.next_seed
