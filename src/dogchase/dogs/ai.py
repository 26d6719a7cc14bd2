from __future__ import annotations

"""Dog steering.

Straight-line pursuit only: no path planning and no obstacle avoidance.
"""

from collections.abc import Sequence

from backyard.geom import Vec3

from ..actors import Dog, DogProfile
from ..sim.level_state import LevelPhase
from ..tuning import REWARD_STOP_DISTANCE, STEER_EPSILON

__all__ = [
    "dog_chase_step",
    "dog_pursues",
    "update_dogs",
]


def dog_pursues(profile: DogProfile, *, phase: LevelPhase, distance: float) -> bool:
    """Whether a dog advances this frame given its distance to the player.

    - catchers in play: only inside their activation radius
    - catchers after all items are gathered: until they reach the stop distance
    - the ghost: inside its activation radius in every phase
    """

    if profile.catcher and phase is not LevelPhase.PLAY:
        return distance > REWARD_STOP_DISTANCE
    return distance < float(profile.activation_radius)


def dog_chase_step(
    dog_pos: Vec3,
    profile: DogProfile,
    *,
    target: Vec3,
    phase: LevelPhase,
    dt: float,
) -> Vec3:
    """Return the displacement for one dog this frame (zero when idle)."""
    if not (dt > 0.0):
        return Vec3()
    direction, distance = (target - dog_pos).normalized_with_length(epsilon=STEER_EPSILON)
    if distance <= 0.0:
        # Already on top of the target: no direction to steer along.
        return Vec3()
    if not dog_pursues(profile, phase=phase, distance=distance):
        return Vec3()
    return direction * (float(profile.speed) * float(dt))


def update_dogs(dogs: Sequence[Dog], *, player_pos: Vec3, phase: LevelPhase, dt: float) -> None:
    """Move every dog toward a frozen player position; each dog writes only itself."""
    for dog in dogs:
        step = dog_chase_step(dog.pos, dog.profile, target=player_pos, phase=phase, dt=dt)
        if step.length_sq() <= 0.0:
            continue
        dog.pos = dog.pos + step
        dog.facing_yaw = step.ground_yaw()
