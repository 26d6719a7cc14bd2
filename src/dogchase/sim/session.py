from __future__ import annotations

from dataclasses import dataclass, field

from ..actors import Collectible, Dog, DogName, Player, build_dogs
from ..debug_log import debug_log
from ..dogs.ai import update_dogs
from ..levels import LevelDefinition, last_level_index, level_by_index
from ..tuning import LEVEL_TRANSITION_DELAY, REWARD_ARRIVAL_DISTANCE
from .day_night import DayNightCycle, LightingState, lighting_for_mode
from .input import FrameInput, normalize_frame_input
from .level_state import LevelPhase, LevelState, PendingTransition
from .movement import apply_look, integrate_player_movement
from .proximity import all_within, collect_in_range, find_catcher
from .snapshot import (
    CollectibleView,
    DogView,
    HudState,
    OverlayMessage,
    PlayerView,
    WorldSnapshot,
)

STATUS_HIDDEN = "Hidden"
STATUS_REWARD = "Reward"
STATUS_CAUGHT = "Caught"
STATUS_LEVEL_COMPLETE = "Level complete"
STATUS_ALL_CLEAR = "All clear"

REWARD_OBJECTIVE = "Let the dogs reach you"

CAUGHT_MESSAGE = OverlayMessage("You lose", "The dogs caught you. Restart the round.")
SESSION_COMPLETE_MESSAGE = OverlayMessage("All levels cleared", "Start a new game to play again.")


@dataclass(slots=True)
class FrameEvents:
    collected: list[int] = field(default_factory=list)
    caught_by: DogName | None = None
    reward_started: bool = False
    level_completed: bool = False
    level_loaded: int | None = None
    session_completed: bool = False
    transition_dropped: bool = False


def _require_level(index: int) -> LevelDefinition:
    level = level_by_index(index)
    if level is None:
        raise ValueError(f"unknown level {index}")
    return level


@dataclass(slots=True)
class GameSession:
    """Owns all mutable simulation state for one player's game.

    `step` runs one frame in a fixed order: look and movement, dog steering,
    day/night, catch check, collect check, then the level state reaction.
    """

    player: Player = field(default_factory=Player)
    dogs: list[Dog] = field(default_factory=build_dogs)
    collectibles: list[Collectible] = field(default_factory=list)
    level: LevelState = field(default_factory=LevelState)
    day_night: DayNightCycle = field(default_factory=DayNightCycle)

    running: bool = True
    caught: bool = False
    session_complete: bool = False
    # Bumped on every level load so stale deferred transitions never fire.
    generation: int = 0
    pending: PendingTransition | None = None
    overlay: OverlayMessage | None = None
    objective: str = ""

    tick: int = 0
    elapsed: float = 0.0

    @classmethod
    def build(cls, *, level_index: int = 1) -> GameSession:
        session = cls()
        session.setup_level(level_index)
        return session

    @property
    def definition(self) -> LevelDefinition:
        return _require_level(self.level.level_index)

    @property
    def phase(self) -> LevelPhase:
        return self.level.phase

    def dog(self, name: DogName) -> Dog:
        for dog in self.dogs:
            if dog.name is name:
                return dog
        raise KeyError(name.value)

    def setup_level(self, level_index: int) -> None:
        self._load_level(_require_level(level_index), reason="setup")

    def restart(self) -> None:
        """Retry the current level from its spawn layout; the level index is kept."""
        debug_log("restart", level=int(self.level.level_index), caught=bool(self.caught))
        self._load_level(self.definition, reason="restart")

    def new_game(self) -> None:
        self._load_level(_require_level(1), reason="new_game")

    def _load_level(self, level: LevelDefinition, *, reason: str) -> None:
        self.generation += 1
        self.pending = None
        self.collectibles = [Collectible(pos=pos, kind=level.kind) for pos in level.collectible_points()]
        self.level.begin(level.index, len(self.collectibles))
        self.day_night.reset()

        self.player.pos = level.player_spawn
        self.player.facing_yaw = 0.0
        for dog in self.dogs:
            dog.pos = level.dog_spawn(dog.name)
            dog.facing_yaw = 0.0

        self.running = True
        self.caught = False
        self.session_complete = False
        self.overlay = None
        self.objective = level.objective
        debug_log(
            "level_setup",
            level=int(level.index),
            reason=reason,
            generation=int(self.generation),
            total=int(self.level.total),
        )

    def step(self, frame: FrameInput | None = None) -> FrameEvents:
        frame = normalize_frame_input(frame)
        dt = float(frame.dt)
        events = FrameEvents()

        self._advance_pending(dt, events)

        apply_look(self.player, yaw_delta=frame.yaw_delta, pitch_delta=frame.pitch_delta)
        if self.running:
            integrate_player_movement(self.player, frame.move, run=frame.run, dt=dt)
        else:
            self.player.speed = 0.0

        # Dogs steer toward the post-movement player position, frozen for the frame.
        player_pos = self.player.pos
        update_dogs(self.dogs, player_pos=player_pos, phase=self.level.phase, dt=dt)

        if self.definition.day_night_cycle:
            self.day_night.advance(dt)

        if self.running:
            self._check_caught(events)
        if self.running:
            self._check_collectibles(events)
        if self.running and self.level.phase is LevelPhase.REWARD:
            self._check_reward_arrival(events)

        self.tick += 1
        self.elapsed += dt
        return events

    def _check_caught(self, events: FrameEvents) -> None:
        catcher = find_catcher(self.player.pos, self.dogs)
        if catcher is None:
            return
        self.running = False
        self.caught = True
        self.overlay = CAUGHT_MESSAGE
        events.caught_by = catcher.name
        debug_log("caught", level=int(self.level.level_index), dog=catcher.name.value, tick=int(self.tick))

    def _check_collectibles(self, events: FrameEvents) -> None:
        hits = collect_in_range(self.player.pos, self.collectibles)
        if not hits:
            return
        for idx in hits:
            self.collectibles[idx].visible = False
        events.collected.extend(hits)
        debug_log(
            "collect",
            level=int(self.level.level_index),
            items=",".join(str(idx) for idx in hits),
            collected=int(self.level.collected + len(hits)),
        )
        if self.level.collect(len(hits)):
            self.objective = REWARD_OBJECTIVE
            events.reward_started = True
            debug_log("reward", level=int(self.level.level_index))

    def _check_reward_arrival(self, events: FrameEvents) -> None:
        catchers = [dog.pos for dog in self.dogs if dog.catcher]
        if not all_within(self.player.pos, catchers, REWARD_ARRIVAL_DISTANCE):
            return
        if not self.level.arrive():
            return
        level = self.definition
        self.running = False
        self.overlay = OverlayMessage("Level complete", level.complete_message)
        target: int | None = None
        if level.index < last_level_index():
            target = level.index + 1
        self.pending = PendingTransition(
            generation=int(self.generation),
            target_level=target,
            remaining=float(LEVEL_TRANSITION_DELAY),
        )
        events.level_completed = True
        debug_log("level_complete", level=int(level.index), next_level=str(target))

    def _advance_pending(self, dt: float, events: FrameEvents) -> None:
        pending = self.pending
        if pending is None:
            return
        # Level loads clear `pending` themselves; this catches transitions
        # scheduled from outside the session against an older load.
        if pending.generation != self.generation:
            self.pending = None
            events.transition_dropped = True
            debug_log("transition_dropped", generation=int(pending.generation), current=int(self.generation))
            return
        pending = pending.advance(dt)
        if not pending.due:
            self.pending = pending
            return
        self.pending = None
        if pending.target_level is None:
            self.session_complete = True
            self.overlay = SESSION_COMPLETE_MESSAGE
            events.session_completed = True
            debug_log("session_complete", level=int(self.level.level_index))
            return
        self.setup_level(pending.target_level)
        events.level_loaded = int(pending.target_level)

    def status_label(self) -> str:
        if self.session_complete:
            return STATUS_ALL_CLEAR
        if self.caught:
            return STATUS_CAUGHT
        phase = self.level.phase
        if phase is LevelPhase.TRANSITION:
            return STATUS_LEVEL_COMPLETE
        if phase is LevelPhase.REWARD:
            return STATUS_REWARD
        return STATUS_HIDDEN

    def lighting(self) -> LightingState:
        level = self.definition
        if level.day_night_cycle:
            return self.day_night.lighting()
        return lighting_for_mode(level.lighting)

    def snapshot(self) -> WorldSnapshot:
        player = self.player
        return WorldSnapshot(
            tick=int(self.tick),
            player=PlayerView(
                pos=player.pos,
                facing_yaw=float(player.facing_yaw),
                yaw=float(player.yaw),
                pitch=float(player.pitch),
            ),
            dogs=tuple(DogView(name=dog.name, pos=dog.pos, facing_yaw=float(dog.facing_yaw)) for dog in self.dogs),
            collectibles=tuple(
                CollectibleView(kind=item.kind, pos=item.pos) for item in self.collectibles if item.visible
            ),
            hud=HudState(
                level_index=int(self.level.level_index),
                phase=self.level.phase,
                collected=int(self.level.collected),
                total=int(self.level.total),
                status=self.status_label(),
                objective=self.objective,
                running=bool(self.running),
                session_complete=bool(self.session_complete),
            ),
            lighting=self.lighting(),
            overlay=self.overlay,
        )
