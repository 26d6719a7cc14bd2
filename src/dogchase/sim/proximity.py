from __future__ import annotations

from collections.abc import Sequence

from backyard.geom import Vec3

from ..actors import Collectible, Dog
from ..tuning import CATCH_RADIUS, COLLECT_RADIUS


def within_range(a: Vec3, b: Vec3, radius: float) -> bool:
    """Strict full-3D distance test shared by catch and collect checks."""
    radius = float(radius)
    return Vec3.distance_sq(a, b) < radius * radius


def find_catcher(player_pos: Vec3, dogs: Sequence[Dog], *, radius: float = CATCH_RADIUS) -> Dog | None:
    """Return the closest dog inside the catch radius, if any."""
    closest: Dog | None = None
    closest_sq = float(radius) * float(radius)
    for dog in dogs:
        dist_sq = Vec3.distance_sq(player_pos, dog.pos)
        if dist_sq < closest_sq:
            closest = dog
            closest_sq = dist_sq
    return closest


def collect_in_range(
    player_pos: Vec3,
    collectibles: Sequence[Collectible],
    *,
    radius: float = COLLECT_RADIUS,
) -> list[int]:
    """Indices of visible collectibles the player is touching; nothing is mutated."""
    hits: list[int] = []
    for idx, item in enumerate(collectibles):
        if not item.visible:
            continue
        if within_range(player_pos, item.pos, radius):
            hits.append(idx)
    return hits


def all_within(origin: Vec3, points: Sequence[Vec3], radius: float) -> bool:
    if not points:
        return False
    return all(within_range(origin, point, radius) for point in points)
