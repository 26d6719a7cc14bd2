from __future__ import annotations

from .client import NetClient
from .protocol import (
    BROADCAST_INTERVAL_MS,
    DEFAULT_PORT,
    LINK_TIMEOUT_MS,
    MAX_PLAYERS,
    PLAYER_NAME_MAX_LEN,
    PlayerPose,
    decode_message,
    encode_message,
)
from .roster import PlayerRoster
from .server import BroadcastServer, ServerConfig, start_server_thread
from .transport import PeerAddr, UdpTransport

__all__ = [
    "BROADCAST_INTERVAL_MS",
    "BroadcastServer",
    "DEFAULT_PORT",
    "LINK_TIMEOUT_MS",
    "MAX_PLAYERS",
    "NetClient",
    "PLAYER_NAME_MAX_LEN",
    "PeerAddr",
    "PlayerPose",
    "PlayerRoster",
    "ServerConfig",
    "UdpTransport",
    "decode_message",
    "encode_message",
    "start_server_thread",
]
