"""dvrandao.core

Deterministic primitives: fixed-point math, the PCG32 mixer and the hash chain.

Nothing in here performs I/O or keeps hidden state.
"""

from .exceptions import ConfigError, DvrandaoError, MalformedSnapshotError, RecordError
from .hashchain import ChainStep, Seed256, chain, chain_words, iter_chain

__all__ = [
    "ChainStep",
    "ConfigError",
    "DvrandaoError",
    "MalformedSnapshotError",
    "RecordError",
    "Seed256",
    "chain",
    "chain_words",
    "iter_chain",
]
