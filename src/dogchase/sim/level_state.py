from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class LevelPhase(Enum):
    PLAY = "play"
    REWARD = "reward"
    TRANSITION = "transition"


@dataclass(slots=True)
class LevelState:
    """Progress through one level; phases only move forward until `begin` runs again."""

    level_index: int = 1
    phase: LevelPhase = LevelPhase.PLAY
    collected: int = 0
    total: int = 0

    def begin(self, level_index: int, total: int) -> None:
        total = int(total)
        if total < 0:
            raise ValueError(f"total must be non-negative, got {total}")
        self.level_index = int(level_index)
        self.phase = LevelPhase.PLAY
        self.collected = 0
        self.total = total

    @property
    def all_collected(self) -> bool:
        return self.collected >= self.total

    def collect(self, count: int = 1) -> bool:
        """Record gathered items; returns True on the frame that unlocks the reward."""
        if count <= 0:
            return False
        self.collected = min(self.total, self.collected + int(count))
        if self.phase is LevelPhase.PLAY and self.collected == self.total:
            self.phase = LevelPhase.REWARD
            return True
        return False

    def arrive(self) -> bool:
        if self.phase is not LevelPhase.REWARD:
            return False
        self.phase = LevelPhase.TRANSITION
        return True


@dataclass(frozen=True, slots=True)
class PendingTransition:
    """Deferred level load owned by one session generation.

    `target_level` is None when the finished level was the last one defined.
    """

    generation: int
    target_level: int | None
    remaining: float

    @property
    def due(self) -> bool:
        return self.remaining <= 0.0

    def advance(self, dt: float) -> PendingTransition:
        if not (dt > 0.0):
            return self
        return replace(self, remaining=self.remaining - float(dt))
