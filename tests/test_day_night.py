from __future__ import annotations

import math

import pytest

from dogchase.levels import LightingMode
from dogchase.sim.day_night import (
    SKY_DAY,
    SKY_EVENING,
    SKY_NIGHT,
    DayNightCycle,
    day_night_lighting,
    lighting_for_mode,
    sun_position,
)


def test_fixed_lighting_modes() -> None:
    day = lighting_for_mode(LightingMode.DAY)
    assert day.sky == SKY_DAY
    assert day.ambient_intensity == pytest.approx(0.75)
    assert day.sun_intensity == pytest.approx(1.0)
    assert (day.sun_visible, day.stars_visible, day.flashlight_on) == (True, False, False)

    night = lighting_for_mode(LightingMode.NIGHT)
    assert night.sky == SKY_NIGHT
    assert night.ambient_intensity == pytest.approx(0.25)
    assert night.sun_intensity == pytest.approx(0.2)
    assert (night.sun_visible, night.stars_visible, night.flashlight_on) == (False, True, True)


def test_cycle_lighting_is_a_pure_function_of_the_fraction() -> None:
    noon = day_night_lighting(0.25)
    assert noon.blend == pytest.approx(1.0)
    assert noon.ambient_intensity == pytest.approx(0.9)
    assert noon.sun_intensity == pytest.approx(1.2)
    assert noon.sky.to_hex() == SKY_DAY.to_hex()

    dusk = day_night_lighting(0.75)
    assert dusk.blend == 0.0
    assert dusk.ambient_intensity == pytest.approx(0.55)
    assert dusk.sky.to_hex() == SKY_EVENING.to_hex()

    assert day_night_lighting(1.25) == day_night_lighting(0.25)


def test_sun_orbit() -> None:
    pos = sun_position(math.pi / 2.0)
    assert pos.x == pytest.approx(0.0, abs=1e-9)
    assert pos.y == pytest.approx(38.0)
    assert pos.z == pytest.approx(math.sin(math.pi / 2.0 * 0.7) * 30.0)


def test_cycle_advances_and_wraps() -> None:
    cycle = DayNightCycle()
    cycle.advance(10.0)
    assert cycle.phase_fraction == pytest.approx(0.3)
    cycle.advance(-5.0)
    assert cycle.phase_fraction == pytest.approx(0.3)
    cycle.advance(30.0)
    assert cycle.phase_fraction == pytest.approx(0.2)
    cycle.reset()
    assert cycle.phase_fraction == 0.0
    assert cycle.lighting() == day_night_lighting(0.0)
