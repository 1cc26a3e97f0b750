"""dvrandao: deterministic proof-circle generation.

A seed goes in, a hash chain of random values comes out, and each value is
projected into a circle on a fixed-point field. An external verifier repeats
the same computation from the same seed, so every step here is bit-exact.
"""

from __future__ import annotations

from dvrandao.core.hashchain import ChainStep, Seed256, chain
from dvrandao.simulation.circle import VRFCircle
from dvrandao.simulation.problem import VRFCircleProblem

__all__ = [
    "__version__",
    "ChainStep",
    "Seed256",
    "VRFCircle",
    "VRFCircleProblem",
    "chain",
]

__version__ = "0.3.0"
