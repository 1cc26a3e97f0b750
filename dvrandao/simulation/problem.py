"""dvrandao.simulation.problem

The circle-packing problem: a square field of fixed circles plus the search
for a proof circle that fits between them.

State machine:
  Empty --generate_static_circles--> Populated --reset--> Empty

Seed handling rules:
- every draw consumes the seed and returns the next one; a rejected draw is
  never retried at the same seed
- work is bounded only by the caller's iteration budget; running out of
  budget is a normal outcome, not an error
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from dvrandao.core.config import DEFAULT_AREA_SIZE, DEFAULT_MIN_SOLUTION_RADIUS, ProblemConfig
from dvrandao.core.exceptions import MalformedSnapshotError
from dvrandao.core.hashchain import Seed256, chain
from dvrandao.simulation.circle import VRFCircle

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProblemWork:
    seed: int
    iterations: int


@dataclass(frozen=True, slots=True)
class SolutionCandidate:
    circle: VRFCircle
    seed: int
    iterations: int


@dataclass(frozen=True, slots=True)
class SolutionBatch:
    candidates: list[SolutionCandidate]
    seed: int


def _seed_int(seed: int | Seed256) -> int:
    return seed.to_int() if isinstance(seed, Seed256) else Seed256.from_int(seed).to_int()


def _snapshot_int(value: Any, where: str) -> int:
    if isinstance(value, bool):
        raise MalformedSnapshotError(f"Malformed problem snapshot, {where} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 0)
        except ValueError as e:
            raise MalformedSnapshotError(f"Malformed problem snapshot, {where} is not an integer: {value!r}") from e
    raise MalformedSnapshotError(f"Malformed problem snapshot, {where} must be an integer")


class VRFCircleProblem:
    """Field of static circles inside ``[0, area_size]`` squared."""

    def __init__(
        self,
        *,
        area_size: int = DEFAULT_AREA_SIZE,
        max_radius: int | None = None,
        min_solution_radius: int = DEFAULT_MIN_SOLUTION_RADIUS,
        enforce_bounds: bool = False,
    ) -> None:
        self.area_size = int(area_size)
        self.max_radius = int(max_radius) if max_radius is not None else self.area_size >> 1
        if self.area_size <= 0 or self.max_radius <= 0:
            raise ValueError(f"area_size and max_radius must be positive: {self.area_size}, {self.max_radius}")
        self.min_solution_radius = int(min_solution_radius)
        self.enforce_bounds = bool(enforce_bounds)
        self.static_circles: list[VRFCircle] = []

    @classmethod
    def from_config(cls, cfg: ProblemConfig) -> VRFCircleProblem:
        return cls(
            area_size=cfg.area_size,
            max_radius=cfg.resolved_max_radius,
            min_solution_radius=cfg.min_solution_radius,
            enforce_bounds=cfg.enforce_bounds,
        )

    def circle_count(self) -> int:
        return len(self.static_circles)

    def reset(self) -> None:
        self.static_circles.clear()

    def has_intersections(self, test_circle: VRFCircle) -> bool:
        return any(test_circle.test_collision(c) for c in self.static_circles)

    def is_circle_in_problem_area(self, test_circle: VRFCircle) -> bool:
        return test_circle.is_circle_in_problem_area(self.area_size)

    def _draw(self, seed: int) -> tuple[VRFCircle, int]:
        rnd, next_seed = chain(seed)
        return VRFCircle.from_random(rnd, self.area_size, self.max_radius), next_seed

    def insert_static_circle(self, seed: int | Seed256) -> int:
        """Try to add one random circle to the field.

        The circle may or may not be inserted; check ``circle_count()``.
        Returns the next seed either way.
        """
        candidate, next_seed = self._draw(_seed_int(seed))

        if self.enforce_bounds and not self.is_circle_in_problem_area(candidate):
            logger.debug("static_circle_out_of_area", extra={"circle": candidate.as_triple()})
            return next_seed

        if self.has_intersections(candidate):
            logger.debug("static_circle_collides", extra={"circle": candidate.as_triple()})
            return next_seed

        self.static_circles.append(candidate)
        return next_seed

    def generate_static_circles(self, target_count: int, max_iterations: int, seed: int | Seed256) -> ProblemWork:
        self.reset()

        iterations = 0
        current = _seed_int(seed)
        while len(self.static_circles) < target_count and iterations < max_iterations:
            current = self.insert_static_circle(current)
            iterations += 1

        if len(self.static_circles) < target_count:
            logger.info(
                "static_field_underfilled",
                extra={"circles": len(self.static_circles), "target": target_count, "iterations": iterations},
            )
        else:
            logger.info("static_field_generated", extra={"circles": len(self.static_circles), "iterations": iterations})

        return ProblemWork(seed=current, iterations=iterations)

    def is_valid_solution(self, test_circle: VRFCircle) -> bool:
        if test_circle.radius < self.min_solution_radius:
            return False
        if not self.is_circle_in_problem_area(test_circle):
            return False
        return not self.has_intersections(test_circle)

    def generate_test_circle(self, seed: int | Seed256, max_iterations: int) -> SolutionCandidate:
        """Search for a proof circle by rejection sampling.

        The draw count is part of the contract with the external verifier:
        one draw up front, then one more after every rejected candidate. On
        exhaustion the last rejected circle comes back (callers must re-check
        ``is_valid_solution``) together with the seed after the final draw.
        """
        circle = VRFCircle()
        iterations = 1
        rnd, next_seed = chain(_seed_int(seed))
        while iterations <= max_iterations:
            circle = VRFCircle.from_random(rnd, self.area_size, self.max_radius)
            if self.is_valid_solution(circle):
                logger.info("solution_found", extra={"circle": circle.as_triple(), "iterations": iterations})
                return SolutionCandidate(circle=circle, seed=next_seed, iterations=iterations)

            rnd, next_seed = chain(next_seed)
            iterations += 1

        logger.info("solution_search_exhausted", extra={"max_iterations": max_iterations})
        return SolutionCandidate(circle=circle, seed=next_seed, iterations=iterations)

    def generate_solutions(self, seed: int | Seed256, count: int, max_iterations: int) -> SolutionBatch:
        """Run ``count`` searches back to back on one seed chain.

        Each search starts from the seed the previous one returned, the way
        records for a sequence of islands are produced.
        """
        current = _seed_int(seed)
        out: list[SolutionCandidate] = []
        for _ in range(count):
            candidate = self.generate_test_circle(current, max_iterations)
            out.append(candidate)
            current = candidate.seed
        return SolutionBatch(candidates=out, seed=current)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def to_snapshot(self) -> list[Any]:
        return [
            self.area_size,
            self.max_radius,
            self.min_solution_radius,
            [c.as_triple() for c in self.static_circles],
        ]

    def restore(self, snapshot: Any) -> None:
        """Load constants and circles from a snapshot.

        The whole snapshot is validated before anything is replaced.
        """
        if not isinstance(snapshot, (list, tuple)):
            raise MalformedSnapshotError("Malformed problem snapshot, expected a 4 element array")
        if len(snapshot) != 4 or not isinstance(snapshot[3], (list, tuple)):
            raise MalformedSnapshotError("Malformed problem snapshot, expected [area_size, max_radius, min_radius, circles]")

        area_size = _snapshot_int(snapshot[0], "area_size")
        max_radius = _snapshot_int(snapshot[1], "max_radius")
        min_radius = _snapshot_int(snapshot[2], "min_radius")
        if area_size <= 0 or max_radius <= 0:
            raise MalformedSnapshotError("Malformed problem snapshot, area_size and max_radius must be positive")

        circles: list[VRFCircle] = []
        for i, entry in enumerate(snapshot[3]):
            if not isinstance(entry, (list, tuple)) or len(entry) != 3:
                raise MalformedSnapshotError(f"Malformed problem snapshot, circle {i} must be [x, y, radius]")
            x, y, r = (_snapshot_int(v, f"circle {i}") for v in entry)
            circles.append(VRFCircle(x, y, r))

        self.area_size = area_size
        self.max_radius = max_radius
        self.min_solution_radius = min_radius
        self.static_circles = circles

    @classmethod
    def from_snapshot(cls, snapshot: Any, *, enforce_bounds: bool = False) -> VRFCircleProblem:
        """Build a problem from a snapshot.

        The insertion rule is not part of the snapshot layout. Pass the
        ``enforce_bounds`` the field was generated with if it will be grown
        again.
        """
        problem = cls(enforce_bounds=enforce_bounds)
        problem.restore(snapshot)
        return problem

    def describe(self) -> str:
        lines = [
            "{",
            f"  problem_area_size:{self.area_size},",
            f"  max_circle_radius:{self.max_radius},",
            f"  solution_min_radius:{self.min_solution_radius},",
            "  static_circles:[",
        ]
        lines.extend(f"    {c}" for c in self.static_circles)
        lines.append("  ]")
        lines.append("}")
        return "\n".join(lines)


def _encode_int(v: int, encoding: Literal["hex", "dec"]) -> str:
    return hex(v) if encoding == "hex" else str(v)


def dumps_snapshot(problem: VRFCircleProblem, *, encoding: Literal["hex", "dec"] = "hex", indent: int | None = None) -> str:
    """Serialize a snapshot to JSON with big integers as strings."""
    if encoding not in ("hex", "dec"):
        raise ValueError(f"unknown snapshot encoding: {encoding}")

    area, max_r, min_r, circles = problem.to_snapshot()
    doc = [
        _encode_int(area, encoding),
        _encode_int(max_r, encoding),
        _encode_int(min_r, encoding),
        [[_encode_int(v, encoding) for v in triple] for triple in circles],
    ]
    return json.dumps(doc, indent=indent)


def loads_snapshot(text: str | bytes, *, enforce_bounds: bool = False) -> VRFCircleProblem:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedSnapshotError("Malformed problem snapshot, not valid JSON") from e
    return VRFCircleProblem.from_snapshot(doc, enforce_bounds=enforce_bounds)


def circles_pairwise_disjoint(circles: Sequence[VRFCircle]) -> bool:
    for i, a in enumerate(circles):
        for b in circles[i + 1 :]:
            if a.test_collision(b):
                return False
    return True
