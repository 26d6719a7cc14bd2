from __future__ import annotations

from dataclasses import dataclass
import math
from typing import TYPE_CHECKING

from .math import clamp

if TYPE_CHECKING:
    import pyray as rl


@dataclass(slots=True, frozen=True)
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def length_sq(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def length(self) -> float:
        return math.sqrt(self.length_sq())

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vec3:
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> Vec3:
        return self * scalar

    def __truediv__(self, scalar: float) -> Vec3:
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def normalized_with_length(self, *, epsilon: float = 1e-6) -> tuple[Vec3, float]:
        magnitude = self.length()
        if magnitude <= epsilon:
            return Vec3(), 0.0
        return self / magnitude, magnitude

    def ground_yaw(self) -> float:
        """Yaw of the ground-plane component; 0 faces +z, positive turns toward +x."""
        return math.atan2(self.x, self.z)

    def offset(self, *, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> Vec3:
        return Vec3(self.x + dx, self.y + dy, self.z + dz)

    def clamp_ground(self, limit: float) -> Vec3:
        return Vec3(
            x=clamp(self.x, -limit, limit),
            y=self.y,
            z=clamp(self.z, -limit, limit),
        )

    @classmethod
    def on_ground(cls, x: float, z: float) -> Vec3:
        return cls(x=float(x), y=0.0, z=float(z))

    def to_rl(self) -> rl.Vector3:
        import pyray as rl

        return rl.Vector3(self.x, self.y, self.z)

    @staticmethod
    def distance_sq(a: Vec3, b: Vec3) -> float:
        dx = b.x - a.x
        dy = b.y - a.y
        dz = b.z - a.z
        return dx * dx + dy * dy + dz * dz
