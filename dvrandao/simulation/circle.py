"""dvrandao.simulation.circle

Proof circles in Q32.32 coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass

from dvrandao.core import fixmath
from dvrandao.core.pcg import UINT64_MASK, rotate_right_64


@dataclass(slots=True)
class VRFCircle:
    x: int = 0
    y: int = 0
    radius: int = -1

    def is_valid(self) -> bool:
        return self.radius > 0

    @classmethod
    def from_random(cls, rnd: int, area_size: int, max_radius: int) -> VRFCircle:
        """Project a 256-bit random value into a circle.

        The value is split into four little-endian 64-bit words; the top word
        is folded into the other three before reducing them modulo the area
        and radius bounds.
        """
        u_x = rnd & UINT64_MASK
        u_y = (rnd >> 64) & UINT64_MASK
        u_radius = (rnd >> 128) & UINT64_MASK
        u_carry = (rnd >> 192) & UINT64_MASK

        u_x ^= u_carry
        u_y ^= rotate_right_64(u_carry, 24)
        u_radius ^= rotate_right_64(u_carry, 48)

        return cls(u_x % area_size, u_y % area_size, u_radius % max_radius)

    def test_collision(self, other: VRFCircle) -> bool:
        """Strict overlap test. Touching circles do not collide."""
        dx = fixmath.sub(self.x, other.x)
        dy = fixmath.sub(self.y, other.y)
        dist_sqr = fixmath.add(fixmath.mul(dx, dx), fixmath.mul(dy, dy))
        radius_sum = fixmath.add(self.radius, other.radius)
        return fixmath.mul(radius_sum, radius_sum) > dist_sqr

    def is_circle_in_problem_area(self, area_size: int) -> bool:
        r = self.radius
        if self.x < r or self.y < r:
            return False
        if fixmath.add(self.x, r) > area_size or fixmath.add(self.y, r) > area_size:
            return False
        return True

    def as_triple(self) -> list[int]:
        return [self.x, self.y, self.radius]

    def __str__(self) -> str:
        return f"{{x:{self.x}, y:{self.y}, radius:{self.radius}}}"
