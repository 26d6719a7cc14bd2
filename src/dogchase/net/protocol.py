from __future__ import annotations

from typing import Any, TypeAlias

import msgspec

from backyard.config import DEFAULT_SERVER_PORT

DEFAULT_PORT = DEFAULT_SERVER_PORT
MAX_PLAYERS = 3
PLAYER_NAME_MAX_LEN = 16
BROADCAST_INTERVAL_MS = 100
LINK_TIMEOUT_MS = 3000
JOIN_RESEND_MS = 200
POSE_SEND_INTERVAL_MS = 50

REJECT_NAME = "name"
REJECT_FULL = "full"


class Join(msgspec.Struct, tag_field="kind", tag="join", forbid_unknown_fields=True):
    # Left untyped so a non-string name becomes a `name` rejection instead of a dropped datagram.
    name: Any = ""


class JoinResult(msgspec.Struct, tag_field="kind", tag="join_result", forbid_unknown_fields=True):
    ok: bool = False
    id: str = ""
    capacity: int = MAX_PLAYERS
    reason: str = ""


class State(msgspec.Struct, tag_field="kind", tag="state", forbid_unknown_fields=True):
    """Self-reported pose; fields stay untyped and are coerced by the roster."""

    x: Any = 0.0
    y: Any = 0.0
    z: Any = 0.0
    yaw: Any = 0.0


class PlayerPose(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    id: str = ""
    name: str = ""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    yaw: float = 0.0


class Players(msgspec.Struct, tag_field="kind", tag="players", forbid_unknown_fields=True):
    players: list[PlayerPose] = msgspec.field(default_factory=list)


class Leave(msgspec.Struct, tag_field="kind", tag="leave", forbid_unknown_fields=True):
    reason: str = ""


NetMessage: TypeAlias = Join | JoinResult | State | Players | Leave


_MESSAGE_DECODER = msgspec.msgpack.Decoder(type=NetMessage)


def encode_message(message: NetMessage) -> bytes:
    return msgspec.msgpack.encode(message)


def decode_message(blob: bytes) -> NetMessage:
    return _MESSAGE_DECODER.decode(blob)
