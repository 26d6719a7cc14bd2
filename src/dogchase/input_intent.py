from __future__ import annotations

"""Keyboard, mouse and touch input folded into one `FrameInput` per frame."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from backyard.config import DEFAULT_MOUSE_SENSITIVITY, DEFAULT_TOUCH_LOOK_SENSITIVITY
from backyard.math import clamp

from .debug_log import debug_log
from .sim.input import FrameInput, MoveIntent

KEY_FORWARD = frozenset({"w", "up"})
KEY_BACK = frozenset({"s", "down"})
KEY_LEFT = frozenset({"a", "left"})
KEY_RIGHT = frozenset({"d", "right"})
KEY_RUN = frozenset({"shift"})

TOUCH_DEADZONE = 0.1
TOUCH_STICK_RADIUS = 60.0
TOUCH_LOOK_DECAY = 0.85


@dataclass(frozen=True, slots=True)
class InputSample:
    """Raw per-frame state from one input backend (pixels for pointer deltas)."""

    keys: frozenset[str] = frozenset()
    stick: MoveIntent = field(default_factory=MoveIntent)
    run_touch: bool = False
    mouse_dx: float = 0.0
    mouse_dy: float = 0.0
    touch_look_dx: float = 0.0
    touch_look_dy: float = 0.0


InputSource = Callable[[], InputSample]


def keyboard_intent(keys: Iterable[str]) -> MoveIntent:
    pressed = {str(key).lower() for key in keys}
    x = 0.0
    z = 0.0
    if pressed & KEY_FORWARD:
        z -= 1.0
    if pressed & KEY_BACK:
        z += 1.0
    if pressed & KEY_LEFT:
        x -= 1.0
    if pressed & KEY_RIGHT:
        x += 1.0
    return MoveIntent(x, z)


@dataclass(slots=True)
class TouchStick:
    """Virtual joystick: drag distance from the press point maps to [-1, 1] per axis."""

    radius: float = TOUCH_STICK_RADIUS
    origin: tuple[float, float] | None = None
    vector: MoveIntent = field(default_factory=MoveIntent)

    def press(self, x: float, y: float) -> None:
        self.origin = (float(x), float(y))
        self.vector = MoveIntent()

    def drag(self, x: float, y: float) -> None:
        origin = self.origin
        if origin is None:
            return
        radius = float(self.radius)
        self.vector = MoveIntent(
            clamp((float(x) - origin[0]) / radius, -1.0, 1.0),
            clamp((float(y) - origin[1]) / radius, -1.0, 1.0),
        )

    def release(self) -> None:
        self.origin = None
        self.vector = MoveIntent()


@dataclass(slots=True)
class IntentAggregator:
    mouse_sensitivity: float = DEFAULT_MOUSE_SENSITIVITY
    touch_look_sensitivity: float = DEFAULT_TOUCH_LOOK_SENSITIVITY
    invert_pitch: bool = False
    touch_yaw: float = 0.0
    touch_pitch: float = 0.0
    source_failures: int = 0

    def combine(self, dt: float, sample: InputSample) -> FrameInput:
        keys = keyboard_intent(sample.keys)
        x = keys.x
        z = keys.z
        stick = sample.stick
        if abs(stick.x) > TOUCH_DEADZONE or abs(stick.z) > TOUCH_DEADZONE:
            x += stick.x
            z += stick.z
        run = bool(sample.run_touch) or bool({str(key).lower() for key in sample.keys} & KEY_RUN)

        # Touch look keeps momentum between frames; mouse look applies once.
        self.touch_yaw -= float(sample.touch_look_dx) * float(self.touch_look_sensitivity)
        self.touch_pitch -= float(sample.touch_look_dy) * float(self.touch_look_sensitivity)
        yaw_delta = -float(sample.mouse_dx) * float(self.mouse_sensitivity) + self.touch_yaw
        pitch_delta = -float(sample.mouse_dy) * float(self.mouse_sensitivity) + self.touch_pitch
        self.touch_yaw *= TOUCH_LOOK_DECAY
        self.touch_pitch *= TOUCH_LOOK_DECAY
        if self.invert_pitch:
            pitch_delta = -pitch_delta

        return FrameInput(
            dt=float(dt),
            move=MoveIntent(clamp(x, -1.0, 1.0), clamp(z, -1.0, 1.0)),
            run=run,
            yaw_delta=yaw_delta,
            pitch_delta=pitch_delta,
        )

    def poll(self, dt: float, source: InputSource) -> FrameInput:
        """Read one backend sample; a backend that raises yields an idle frame."""
        try:
            sample = source()
        except Exception as exc:
            # Pointer capture and similar platform quirks must not stop the frame.
            self.source_failures += 1
            debug_log("input_source_failed", error=type(exc).__name__, failures=int(self.source_failures))
            sample = InputSample()
        return self.combine(dt, sample)
