from __future__ import annotations

import math

from backyard.geom import Vec3
from backyard.math import clamp

from ..actors import Player
from ..tuning import PITCH_LIMIT, RUN_SPEED, WALK_SPEED, WORLD_LIMIT
from .input import MoveIntent


def player_speed(run: bool) -> float:
    return RUN_SPEED if run else WALK_SPEED


def view_relative_direction(intent: MoveIntent, yaw: float) -> Vec3:
    """Rotate a limited intent by camera yaw into a ground-plane direction."""
    intent = intent.limited()
    sin_yaw = math.sin(yaw)
    cos_yaw = math.cos(yaw)
    return Vec3(
        x=intent.x * cos_yaw - intent.z * sin_yaw,
        y=0.0,
        z=intent.z * cos_yaw + intent.x * sin_yaw,
    )


def apply_look(player: Player, *, yaw_delta: float, pitch_delta: float) -> None:
    player.yaw = float(player.yaw) + float(yaw_delta)
    player.pitch = clamp(float(player.pitch) + float(pitch_delta), -PITCH_LIMIT, PITCH_LIMIT)


def integrate_player_movement(
    player: Player,
    intent: MoveIntent,
    *,
    run: bool,
    dt: float,
    limit: float = WORLD_LIMIT,
) -> Vec3:
    """Advance the player for one frame and return the applied displacement.

    Only `player.pos`, `player.speed` and `player.facing_yaw` are written.
    """

    speed = player_speed(run)
    player.speed = speed
    if not (dt > 0.0):
        return Vec3()

    step = view_relative_direction(intent, float(player.yaw)) * (speed * float(dt))
    before = player.pos
    player.pos = (before + step).clamp_ground(float(limit))
    applied = player.pos - before
    if applied.length_sq() > 0.0:
        player.facing_yaw = applied.ground_yaw()
    return applied
