from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from backyard.geom import Vec3

from .actors import CollectibleKind, DogName


class LightingMode(Enum):
    DAY = "day"
    NIGHT = "night"


@dataclass(frozen=True, slots=True, kw_only=True)
class LevelDefinition:
    index: int
    kind: CollectibleKind
    objective: str
    lighting: LightingMode
    collectible_positions: tuple[tuple[float, float], ...]
    player_spawn: Vec3
    dog_spawns: tuple[tuple[DogName, Vec3], ...]
    # Only the first level runs the sun across the sky.
    day_night_cycle: bool = False
    complete_message: str = ""

    def __post_init__(self) -> None:
        index = int(self.index)
        if index < 1:
            raise ValueError(f"level index must be positive, got {index}")
        object.__setattr__(self, "index", index)
        if not self.collectible_positions:
            raise ValueError(f"level {index} has no collectibles")

    @property
    def total(self) -> int:
        return len(self.collectible_positions)

    def collectible_points(self) -> list[Vec3]:
        return [Vec3.on_ground(x, z) for x, z in self.collectible_positions]

    def dog_spawn(self, name: DogName) -> Vec3:
        for dog_name, spawn in self.dog_spawns:
            if dog_name is name:
                return spawn
        raise KeyError(f"level {self.index} has no spawn for {name.value}")


_LEVELS: dict[int, LevelDefinition] = {}


def register_level(level: LevelDefinition) -> LevelDefinition:
    existing = _LEVELS.get(level.index)
    if existing is not None:
        raise ValueError(f"duplicate level {level.index}")
    _LEVELS[level.index] = level
    return level


def all_levels() -> list[LevelDefinition]:
    return [_LEVELS[index] for index in sorted(_LEVELS)]


def level_by_index(index: int) -> LevelDefinition | None:
    return _LEVELS.get(int(index))


def last_level_index() -> int:
    return max(_LEVELS)


_DEFAULT_DOG_SPAWNS: tuple[tuple[DogName, Vec3], ...] = (
    (DogName.GOLDEN, Vec3.on_ground(-6.0, -6.0)),
    (DogName.BULLDOG, Vec3.on_ground(8.0, 6.0)),
    (DogName.GHOST, Vec3.on_ground(-12.0, 12.0)),
)


register_level(
    LevelDefinition(
        index=1,
        kind=CollectibleKind.SAUSAGE,
        objective="Sausages",
        lighting=LightingMode.DAY,
        collectible_positions=(
            (-20.0, -8.0),
            (10.0, -26.0),
            (24.0, 16.0),
            (-30.0, 18.0),
            (4.0, 26.0),
            (-8.0, 30.0),
            (18.0, -34.0),
            (-34.0, -14.0),
            (30.0, 30.0),
            (-2.0, 14.0),
        ),
        player_spawn=Vec3(),
        dog_spawns=_DEFAULT_DOG_SPAWNS,
        day_night_cycle=True,
        complete_message="The dogs got their sausages. On to level 2.",
    )
)

register_level(
    LevelDefinition(
        index=2,
        kind=CollectibleKind.TOY,
        objective="Toys",
        lighting=LightingMode.NIGHT,
        collectible_positions=(
            (-26.0, 6.0),
            (14.0, -28.0),
            (26.0, 22.0),
            (-18.0, 26.0),
            (6.0, 30.0),
            (-10.0, -30.0),
            (20.0, -10.0),
            (-30.0, -22.0),
            (32.0, 10.0),
            (0.0, 18.0),
        ),
        player_spawn=Vec3(),
        dog_spawns=_DEFAULT_DOG_SPAWNS,
        complete_message="The dogs got their toys. Every level is cleared.",
    )
)


__all__ = [
    "LevelDefinition",
    "LightingMode",
    "all_levels",
    "last_level_index",
    "level_by_index",
    "register_level",
]
