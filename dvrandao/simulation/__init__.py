"""dvrandao.simulation

Circle geometry and the packing problem built on the hash chain.
"""

from .circle import VRFCircle
from .problem import (
    ProblemWork,
    SolutionBatch,
    SolutionCandidate,
    VRFCircleProblem,
    dumps_snapshot,
    loads_snapshot,
)

__all__ = [
    "ProblemWork",
    "SolutionBatch",
    "SolutionCandidate",
    "VRFCircle",
    "VRFCircleProblem",
    "dumps_snapshot",
    "loads_snapshot",
]
