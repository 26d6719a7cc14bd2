from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from backyard.geom import Vec3

from .tuning import (
    CATCHER_ACTIVATION_RADIUS,
    CHASE_SPEED,
    GHOST_ACTIVATION_RADIUS,
    GHOST_SPEED,
    WALK_SPEED,
)


class DogName(Enum):
    GOLDEN = "golden"
    BULLDOG = "bulldog"
    GHOST = "ghost"


class CollectibleKind(Enum):
    SAUSAGE = "sausage"
    TOY = "toy"


@dataclass(frozen=True, slots=True)
class DogProfile:
    name: DogName
    speed: float
    activation_radius: float
    # Catchers are the dogs that must be fed during the reward phase.
    catcher: bool


DOG_PROFILES: tuple[DogProfile, ...] = (
    DogProfile(DogName.GOLDEN, CHASE_SPEED, CATCHER_ACTIVATION_RADIUS, catcher=True),
    DogProfile(DogName.BULLDOG, CHASE_SPEED, CATCHER_ACTIVATION_RADIUS, catcher=True),
    DogProfile(DogName.GHOST, GHOST_SPEED, GHOST_ACTIVATION_RADIUS, catcher=False),
)


@dataclass(slots=True, kw_only=True)
class Actor:
    pos: Vec3 = field(default_factory=Vec3)
    facing_yaw: float = 0.0


@dataclass(slots=True, kw_only=True)
class Player(Actor):
    speed: float = WALK_SPEED
    yaw: float = 0.0
    pitch: float = 0.0


@dataclass(slots=True, kw_only=True)
class Dog(Actor):
    profile: DogProfile

    @property
    def name(self) -> DogName:
        return self.profile.name

    @property
    def catcher(self) -> bool:
        return bool(self.profile.catcher)


@dataclass(slots=True, kw_only=True)
class Collectible:
    pos: Vec3
    kind: CollectibleKind
    visible: bool = True


def build_dogs() -> list[Dog]:
    return [Dog(profile=profile) for profile in DOG_PROFILES]


__all__ = [
    "Actor",
    "Collectible",
    "CollectibleKind",
    "DOG_PROFILES",
    "Dog",
    "DogName",
    "DogProfile",
    "Player",
    "build_dogs",
]
