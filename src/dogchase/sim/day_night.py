from __future__ import annotations

from dataclasses import dataclass
import math

from backyard.color import RGBA
from backyard.geom import Vec3
from backyard.math import wrap01

from ..levels import LightingMode
from ..tuning import DAY_NIGHT_RATE, SUN_ORBIT_HEIGHT, SUN_ORBIT_RADIUS, SUN_ORBIT_Z_FREQUENCY

SKY_DAY = RGBA.from_hex(0x7CC7FF)
SKY_EVENING = RGBA.from_hex(0xF7B07B)
SKY_NIGHT = RGBA.from_hex(0x08111F)

DAY_AMBIENT = 0.75
DAY_SUN = 1.0
NIGHT_AMBIENT = 0.25
NIGHT_SUN = 0.2
DEFAULT_SUN_POS = Vec3(10.0, 12.0, 6.0)

# Cycle endpoints: evening at blend 0, full day at blend 1.
CYCLE_AMBIENT_BASE = 0.55
CYCLE_AMBIENT_RANGE = 0.35
CYCLE_SUN_BASE = 0.4
CYCLE_SUN_RANGE = 0.8


@dataclass(frozen=True, slots=True)
class LightingState:
    mode: LightingMode
    sky: RGBA
    ambient_intensity: float
    sun_intensity: float
    sun_pos: Vec3
    sun_visible: bool
    stars_visible: bool
    flashlight_on: bool
    blend: float = 1.0


def lighting_for_mode(mode: LightingMode) -> LightingState:
    if mode is LightingMode.NIGHT:
        return LightingState(
            mode=mode,
            sky=SKY_NIGHT,
            ambient_intensity=NIGHT_AMBIENT,
            sun_intensity=NIGHT_SUN,
            sun_pos=DEFAULT_SUN_POS,
            sun_visible=False,
            stars_visible=True,
            flashlight_on=True,
            blend=0.0,
        )
    return LightingState(
        mode=LightingMode.DAY,
        sky=SKY_DAY,
        ambient_intensity=DAY_AMBIENT,
        sun_intensity=DAY_SUN,
        sun_pos=DEFAULT_SUN_POS,
        sun_visible=True,
        stars_visible=False,
        flashlight_on=False,
        blend=1.0,
    )


def sun_position(angle: float) -> Vec3:
    return Vec3(
        x=math.cos(angle) * SUN_ORBIT_RADIUS,
        y=math.sin(angle) * SUN_ORBIT_RADIUS + SUN_ORBIT_HEIGHT,
        z=math.sin(angle * SUN_ORBIT_Z_FREQUENCY) * SUN_ORBIT_RADIUS,
    )


def day_night_lighting(phase_fraction: float) -> LightingState:
    """Lighting for a point on the day cycle; a pure function of the fraction."""
    angle = wrap01(phase_fraction) * math.tau
    blend = max(0.0, math.sin(angle))
    return LightingState(
        mode=LightingMode.DAY,
        sky=RGBA.lerp(SKY_EVENING, SKY_DAY, blend),
        ambient_intensity=CYCLE_AMBIENT_BASE + blend * CYCLE_AMBIENT_RANGE,
        sun_intensity=CYCLE_SUN_BASE + blend * CYCLE_SUN_RANGE,
        sun_pos=sun_position(angle),
        sun_visible=True,
        stars_visible=False,
        flashlight_on=False,
        blend=blend,
    )


@dataclass(slots=True)
class DayNightCycle:
    phase_fraction: float = 0.0
    rate: float = DAY_NIGHT_RATE

    def reset(self) -> None:
        self.phase_fraction = 0.0

    def advance(self, dt: float) -> None:
        if not (dt > 0.0):
            return
        self.phase_fraction = wrap01(self.phase_fraction + float(dt) * float(self.rate))

    def lighting(self) -> LightingState:
        return day_night_lighting(self.phase_fraction)
