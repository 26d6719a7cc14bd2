from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
import uuid

from backyard.math import finite_or_zero

from .protocol import (
    MAX_PLAYERS,
    PLAYER_NAME_MAX_LEN,
    REJECT_FULL,
    REJECT_NAME,
    JoinResult,
    PlayerPose,
    State,
)


def coerce_number(value: object) -> float:
    """Best-effort numeric coercion for pose telemetry; anything unusable becomes 0."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, (str, bytes, bytearray)):
        text = value.decode("utf-8", errors="replace") if isinstance(value, (bytes, bytearray)) else value
        text = text.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return finite_or_zero(number)


def normalize_name(raw: object) -> str:
    if raw is None or raw is False:
        return ""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    return str(raw).strip()


def new_connection_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(slots=True)
class RosterEntry:
    conn_id: str
    name: str
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    yaw: float = 0.0

    def pose(self) -> PlayerPose:
        return PlayerPose(
            id=str(self.conn_id),
            name=str(self.name),
            x=float(self.x),
            y=float(self.y),
            z=float(self.z),
            yaw=float(self.yaw),
        )


@dataclass(slots=True)
class PlayerRoster:
    """Capacity-bounded map of joined players.

    All mutation goes through the lock so a host thread and a game loop can
    share one roster; `snapshot` hands out immutable copies.
    """

    capacity: int = MAX_PLAYERS
    name_max_len: int = PLAYER_NAME_MAX_LEN
    entries: dict[str, RosterEntry] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock, repr=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self.entries)

    def __contains__(self, conn_id: object) -> bool:
        with self._lock:
            return conn_id in self.entries

    def join(self, conn_id: str, raw_name: object) -> JoinResult:
        name = normalize_name(raw_name)
        if not name or len(name) > int(self.name_max_len):
            return JoinResult(ok=False, reason=REJECT_NAME, capacity=int(self.capacity))
        with self._lock:
            entry = self.entries.get(conn_id)
            if entry is not None:
                # Re-joining from the same connection renames in place.
                entry.name = name
            else:
                if len(self.entries) >= int(self.capacity):
                    return JoinResult(ok=False, reason=REJECT_FULL, capacity=int(self.capacity))
                self.entries[conn_id] = RosterEntry(conn_id=str(conn_id), name=name)
        return JoinResult(ok=True, id=str(conn_id), capacity=int(self.capacity))

    def report_pose(self, conn_id: str, state: State) -> bool:
        with self._lock:
            entry = self.entries.get(conn_id)
            if entry is None:
                return False
            entry.x = coerce_number(state.x)
            entry.y = coerce_number(state.y)
            entry.z = coerce_number(state.z)
            entry.yaw = coerce_number(state.yaw)
        return True

    def remove(self, conn_id: str) -> bool:
        with self._lock:
            return self.entries.pop(conn_id, None) is not None

    def snapshot(self) -> list[PlayerPose]:
        with self._lock:
            return [entry.pose() for entry in self.entries.values()]

    def clear(self) -> None:
        with self._lock:
            self.entries.clear()
