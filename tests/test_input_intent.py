from __future__ import annotations

from pathlib import Path

import pytest

from dogchase.debug_log import init_debug_log
from dogchase.input_intent import InputSample, IntentAggregator, TouchStick, keyboard_intent
from dogchase.sim.input import MoveIntent


def test_keyboard_intent_maps_wasd_and_arrows() -> None:
    assert keyboard_intent({"w"}) == MoveIntent(0.0, -1.0)
    assert keyboard_intent({"down", "right"}) == MoveIntent(1.0, 1.0)
    assert keyboard_intent({"a", "d"}) == MoveIntent(0.0, 0.0)
    assert keyboard_intent({"W", "Left"}) == MoveIntent(-1.0, -1.0)


def test_touch_stick_inside_deadzone_is_ignored() -> None:
    aggregator = IntentAggregator()
    frame = aggregator.combine(0.016, InputSample(stick=MoveIntent(0.05, -0.08)))
    assert frame.move == MoveIntent(0.0, 0.0)


def test_keyboard_and_stick_are_summed_and_clamped() -> None:
    aggregator = IntentAggregator()
    frame = aggregator.combine(0.016, InputSample(keys=frozenset({"w", "shift"}), stick=MoveIntent(0.5, -0.5)))
    assert frame.move == MoveIntent(0.5, -1.0)
    assert frame.run is True
    assert frame.dt == pytest.approx(0.016)


def test_mouse_look_uses_sensitivity() -> None:
    aggregator = IntentAggregator(mouse_sensitivity=0.002)
    frame = aggregator.combine(0.016, InputSample(mouse_dx=100.0, mouse_dy=-50.0))
    assert frame.yaw_delta == pytest.approx(-0.2)
    assert frame.pitch_delta == pytest.approx(0.1)

    inverted = IntentAggregator(mouse_sensitivity=0.002, invert_pitch=True)
    assert inverted.combine(0.016, InputSample(mouse_dy=-50.0)).pitch_delta == pytest.approx(-0.1)


def test_touch_look_keeps_decaying_momentum() -> None:
    aggregator = IntentAggregator(touch_look_sensitivity=0.0022)
    first = aggregator.combine(0.016, InputSample(touch_look_dx=100.0))
    second = aggregator.combine(0.016, InputSample())
    assert first.yaw_delta == pytest.approx(-0.22)
    assert second.yaw_delta == pytest.approx(-0.22 * 0.85)


def test_touch_stick_tracks_drag_from_press_point() -> None:
    stick = TouchStick(radius=60.0)
    stick.drag(10.0, 10.0)
    assert stick.vector == MoveIntent()

    stick.press(100.0, 200.0)
    stick.drag(130.0, 80.0)
    assert stick.vector == MoveIntent(0.5, -1.0)

    stick.release()
    assert stick.origin is None
    assert stick.vector == MoveIntent()


def test_failing_source_yields_idle_frame_and_is_logged(tmp_path: Path) -> None:
    log_path = init_debug_log(base_dir=tmp_path, role="client")
    aggregator = IntentAggregator()

    def _broken() -> InputSample:
        raise RuntimeError("pointer lock denied")

    frame = aggregator.poll(0.016, _broken)
    assert frame.move == MoveIntent()
    assert frame.run is False
    assert aggregator.source_failures == 1
    assert "event=input_source_failed" in log_path.read_text(encoding="utf-8")

    ok = aggregator.poll(0.016, lambda: InputSample(keys=frozenset({"s"})))
    assert ok.move == MoveIntent(0.0, 1.0)
