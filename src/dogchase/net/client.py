from __future__ import annotations

from dataclasses import dataclass, field
import socket
import time

from backyard.geom import Vec3

from ..debug_log import debug_log
from .protocol import (
    DEFAULT_PORT,
    JOIN_RESEND_MS,
    LINK_TIMEOUT_MS,
    POSE_SEND_INTERVAL_MS,
    Join,
    JoinResult,
    Leave,
    NetMessage,
    PlayerPose,
    Players,
    State,
)
from .transport import MessageTransport, PeerAddr, UdpTransport


def _now_ms() -> int:
    return int(time.monotonic() * 1000.0)


def resolve_server(host: str, port: int) -> PeerAddr:
    """Resolve `host` to the numeric IPv4 address replies will come from."""
    infos = socket.getaddrinfo(str(host).strip().strip("[]"), int(port), socket.AF_INET, socket.SOCK_DGRAM)
    if not infos:
        raise OSError(f"no IPv4 address for {host!r}")
    sockaddr = infos[0][4]
    return (str(sockaddr[0]), int(sockaddr[1]))


@dataclass(slots=True)
class NetClient:
    """Joins a roster server, streams the local pose and keeps the latest roster."""

    name: str
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    transport: MessageTransport | None = None

    player_id: str = field(init=False, default="")
    capacity: int = field(init=False, default=0)
    error: str = field(init=False, default="")
    players: list[PlayerPose] = field(init=False, default_factory=list)

    _pose: State | None = field(init=False, default=None)
    _last_join_ms: int | None = field(init=False, default=None)
    _last_pose_ms: int | None = field(init=False, default=None)
    _last_seen_ms: int = field(init=False, default=0)
    _opened: bool = field(init=False, default=False)
    _resolved: PeerAddr | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        if self.transport is None:
            self.transport = UdpTransport(bind_host="0.0.0.0", bind_port=0)

    @property
    def server_addr(self) -> PeerAddr:
        if self._resolved is not None:
            return self._resolved
        return (str(self.host), int(self.port))

    @property
    def joined(self) -> bool:
        return bool(self.player_id)

    def open(self, *, now_ms: int | None = None) -> None:
        if self._opened:
            return
        assert self.transport is not None
        self._resolved = resolve_server(self.host, self.port)
        self.transport.open()
        self._opened = True
        self._last_seen_ms = int(_now_ms() if now_ms is None else now_ms)
        debug_log("net_open", role="client", host=str(self.host), addr=f"{self._resolved[0]}:{self._resolved[1]}")

    def close(self) -> None:
        transport = self.transport
        if not self._opened or transport is None:
            return
        try:
            if self.joined:
                self._send(Leave(reason="quit"))
            transport.close()
        finally:
            self._opened = False
            self.player_id = ""
            self.players = []
            debug_log("net_close", role="client")

    def set_pose(self, pos: Vec3, yaw: float) -> None:
        self._pose = State(x=float(pos.x), y=float(pos.y), z=float(pos.z), yaw=float(yaw))

    def remote_players(self) -> list[PlayerPose]:
        own = self.player_id
        return [pose for pose in self.players if pose.id != own]

    def update(self, *, now_ms: int | None = None) -> None:
        if now_ms is None:
            now_ms = _now_ms()
        transport = self.transport
        if transport is None or not self._opened:
            return

        for addr, message in transport.recv_messages():
            if addr != self.server_addr:
                continue
            self._last_seen_ms = int(now_ms)
            self._handle_message(message)

        if not self.joined and not self.error:
            last = self._last_join_ms
            if last is None or (int(now_ms) - int(last)) >= JOIN_RESEND_MS:
                self._last_join_ms = int(now_ms)
                self._send(Join(name=str(self.name)))

        if self.joined and self._pose is not None:
            last = self._last_pose_ms
            if last is None or (int(now_ms) - int(last)) >= POSE_SEND_INTERVAL_MS:
                self._last_pose_ms = int(now_ms)
                self._send(self._pose)

        if (int(now_ms) - int(self._last_seen_ms)) >= LINK_TIMEOUT_MS and not self.error:
            self.error = "timeout"
            debug_log("net_timeout", role="client", host=str(self.host), port=int(self.port))

    def _handle_message(self, message: NetMessage) -> None:
        if isinstance(message, JoinResult):
            if not message.ok:
                self.error = str(message.reason or "rejected")
                debug_log("net_reject", role="client", reason=self.error)
                return
            self.player_id = str(message.id)
            self.capacity = int(message.capacity)
            self.error = ""
            debug_log("net_join", role="client", id=self.player_id, capacity=int(self.capacity))
            return
        if isinstance(message, Players):
            self.players = list(message.players)
            if self.joined and all(pose.id != self.player_id for pose in self.players):
                # Server timed us out during a stall; join again under a new id.
                debug_log("net_rejoin", role="client", id=self.player_id)
                self.player_id = ""
                self._last_join_ms = None
                self._last_pose_ms = None
            return

    def _send(self, message: NetMessage) -> None:
        transport = self.transport
        if transport is None:
            return
        try:
            transport.send_message(self.server_addr, message)
        except OSError:
            return


__all__ = ["NetClient"]
