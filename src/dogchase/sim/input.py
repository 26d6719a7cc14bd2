from __future__ import annotations

"""Per-frame input contract consumed by the simulation step."""

from dataclasses import dataclass, field
import math

from backyard.math import clamp, finite_or_zero


@dataclass(frozen=True, slots=True)
class MoveIntent:
    """Ground-plane movement intent; `z = -1` walks toward the camera's forward."""

    x: float = 0.0
    z: float = 0.0

    def length(self) -> float:
        return math.hypot(self.x, self.z)

    def is_zero(self) -> bool:
        return self.x == 0.0 and self.z == 0.0

    def limited(self) -> MoveIntent:
        """Scale down to unit length when longer than 1, keeping direction."""
        magnitude = self.length()
        if magnitude <= 1.0:
            return self
        return MoveIntent(self.x / magnitude, self.z / magnitude)


@dataclass(frozen=True, slots=True)
class FrameInput:
    dt: float = 0.0
    move: MoveIntent = field(default_factory=MoveIntent)
    run: bool = False
    yaw_delta: float = 0.0
    pitch_delta: float = 0.0


def normalize_frame_input(frame: FrameInput | None) -> FrameInput:
    """Return a frame with finite values, non-negative dt and intent axes in [-1, 1]."""
    if frame is None:
        return FrameInput()
    dt = finite_or_zero(frame.dt)
    move = frame.move
    return FrameInput(
        dt=max(0.0, dt),
        move=MoveIntent(
            x=clamp(finite_or_zero(move.x), -1.0, 1.0),
            z=clamp(finite_or_zero(move.z), -1.0, 1.0),
        ),
        run=bool(frame.run),
        yaw_delta=finite_or_zero(frame.yaw_delta),
        pitch_delta=finite_or_zero(frame.pitch_delta),
    )
