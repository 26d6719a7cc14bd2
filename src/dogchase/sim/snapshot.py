from __future__ import annotations

from dataclasses import dataclass

import msgspec

from backyard.geom import Vec3

from ..actors import CollectibleKind, DogName
from .day_night import LightingState
from .level_state import LevelPhase


@dataclass(frozen=True, slots=True)
class OverlayMessage:
    title: str
    body: str


@dataclass(frozen=True, slots=True)
class PlayerView:
    pos: Vec3
    facing_yaw: float
    yaw: float
    pitch: float


@dataclass(frozen=True, slots=True)
class DogView:
    name: DogName
    pos: Vec3
    facing_yaw: float


@dataclass(frozen=True, slots=True)
class CollectibleView:
    kind: CollectibleKind
    pos: Vec3


@dataclass(frozen=True, slots=True)
class HudState:
    level_index: int
    phase: LevelPhase
    collected: int
    total: int
    status: str
    objective: str
    running: bool
    session_complete: bool


@dataclass(frozen=True, slots=True)
class WorldSnapshot:
    """Everything the renderer needs for one frame."""

    tick: int
    player: PlayerView
    dogs: tuple[DogView, ...]
    collectibles: tuple[CollectibleView, ...]
    hud: HudState
    lighting: LightingState
    overlay: OverlayMessage | None = None

    def dog(self, name: DogName) -> DogView:
        for view in self.dogs:
            if view.name is name:
                return view
        raise KeyError(name.value)


def encode_snapshot_json(snapshot: WorldSnapshot) -> bytes:
    return msgspec.json.encode(snapshot)
