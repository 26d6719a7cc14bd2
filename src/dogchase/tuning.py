from __future__ import annotations

"""Gameplay tuning constants shared by the simulation modules."""

WALK_SPEED = 4.0
RUN_SPEED = 7.0

WORLD_SIZE = 140.0
WORLD_MARGIN = 4.0
WORLD_LIMIT = WORLD_SIZE / 2.0 - WORLD_MARGIN

PITCH_LIMIT = 1.1

CATCH_RADIUS = 1.5
COLLECT_RADIUS = 1.3

CHASE_SPEED = 1.5
GHOST_SPEED = 2.2
CATCHER_ACTIVATION_RADIUS = 18.0
GHOST_ACTIVATION_RADIUS = 30.0

# Catchers stop advancing inside this distance during the reward phase...
REWARD_STOP_DISTANCE = 1.8
# ...and the level completes once both are inside this one.
REWARD_ARRIVAL_DISTANCE = 2.0

LEVEL_TRANSITION_DELAY = 1.2

DAY_NIGHT_RATE = 0.03
SUN_ORBIT_RADIUS = 30.0
SUN_ORBIT_HEIGHT = 8.0
SUN_ORBIT_Z_FREQUENCY = 0.7

STEER_EPSILON = 1e-6
