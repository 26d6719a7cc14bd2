from __future__ import annotations

from dataclasses import dataclass, field
import threading
import time

from ..debug_log import debug_log
from .protocol import (
    BROADCAST_INTERVAL_MS,
    DEFAULT_PORT,
    LINK_TIMEOUT_MS,
    MAX_PLAYERS,
    Join,
    Leave,
    NetMessage,
    Players,
    State,
)
from .roster import PlayerRoster, new_connection_id
from .transport import MessageTransport, PeerAddr, UdpTransport


def _now_ms() -> int:
    return int(time.monotonic() * 1000.0)


def _addr_text(addr: PeerAddr) -> str:
    return f"{addr[0]}:{addr[1]}"


@dataclass(slots=True)
class ServerConfig:
    bind_host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    capacity: int = MAX_PLAYERS
    broadcast_interval_ms: int = BROADCAST_INTERVAL_MS
    link_timeout_ms: int = LINK_TIMEOUT_MS


@dataclass(slots=True)
class _Connection:
    addr: PeerAddr
    conn_id: str
    last_seen_ms: int = 0


@dataclass(slots=True)
class BroadcastServer:
    """Authoritative roster host.

    Every datagram source counts as a connection; only connections that joined
    appear in the roster. The roster is broadcast to every connection on a
    fixed interval, independent of message traffic.
    """

    cfg: ServerConfig = field(default_factory=ServerConfig)
    transport: MessageTransport | None = None
    roster: PlayerRoster = field(init=False)
    connections: dict[PeerAddr, _Connection] = field(init=False, default_factory=dict)
    last_broadcast_ms: int | None = field(init=False, default=None)
    broadcasts_sent: int = field(init=False, default=0)
    opened: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.roster = PlayerRoster(capacity=int(self.cfg.capacity))
        if self.transport is None:
            self.transport = UdpTransport(bind_host=str(self.cfg.bind_host), bind_port=int(self.cfg.port))

    @property
    def bound_port(self) -> int:
        transport = self.transport
        if isinstance(transport, UdpTransport):
            return int(transport.bound_port)
        return int(self.cfg.port)

    def open(self) -> None:
        if self.opened:
            return
        assert self.transport is not None
        self.transport.open()
        self.opened = True
        debug_log("net_open", role="server", bind_host=str(self.cfg.bind_host), bind_port=int(self.bound_port))

    def close(self) -> None:
        transport = self.transport
        try:
            if transport is not None:
                transport.close()
        finally:
            self.opened = False
            self.connections.clear()
            self.roster.clear()
            self.last_broadcast_ms = None
            debug_log("net_close", role="server")

    def _connection(self, addr: PeerAddr, *, now_ms: int) -> _Connection:
        conn = self.connections.get(addr)
        if conn is None:
            conn = _Connection(addr=addr, conn_id=new_connection_id(), last_seen_ms=int(now_ms))
            self.connections[addr] = conn
        conn.last_seen_ms = int(now_ms)
        return conn

    def update(self, *, now_ms: int | None = None) -> None:
        if now_ms is None:
            now_ms = _now_ms()
        transport = self.transport
        if transport is None or not self.opened:
            return

        for addr, message in transport.recv_messages():
            self.handle_message(addr, message, now_ms=int(now_ms))

        # Connection loss is implicit: a silent peer is dropped after the link timeout.
        for addr, conn in list(self.connections.items()):
            if (int(now_ms) - int(conn.last_seen_ms)) < int(self.cfg.link_timeout_ms):
                continue
            self.disconnect(addr, reason="timeout")

        last = self.last_broadcast_ms
        if last is None or (int(now_ms) - int(last)) >= int(self.cfg.broadcast_interval_ms):
            self.last_broadcast_ms = int(now_ms)
            self.broadcast_roster()

    def handle_message(self, addr: PeerAddr, message: NetMessage, *, now_ms: int) -> None:
        conn = self._connection(addr, now_ms=int(now_ms))
        if isinstance(message, Join):
            result = self.roster.join(conn.conn_id, message.name)
            if result.ok:
                debug_log("net_join", addr=_addr_text(addr), id=conn.conn_id, players=len(self.roster))
            else:
                debug_log("net_reject", addr=_addr_text(addr), reason=str(result.reason))
            self._send(addr, result)
            return
        if isinstance(message, State):
            self.roster.report_pose(conn.conn_id, message)
            return
        if isinstance(message, Leave):
            self.disconnect(addr, reason=str(message.reason or "leave"))
            return

    def disconnect(self, addr: PeerAddr, *, reason: str = "") -> None:
        conn = self.connections.pop(addr, None)
        if conn is None:
            return
        removed = self.roster.remove(conn.conn_id)
        event = "net_timeout" if reason == "timeout" else "net_leave"
        debug_log(event, addr=_addr_text(addr), id=conn.conn_id, joined=bool(removed))

    def broadcast_roster(self) -> Players:
        players = Players(players=self.roster.snapshot())
        for addr in list(self.connections):
            self._send(addr, players)
        self.broadcasts_sent += 1
        return players

    def _send(self, addr: PeerAddr, message: NetMessage) -> None:
        transport = self.transport
        if transport is None:
            return
        try:
            transport.send_message(addr, message)
        except OSError:
            # Undeliverable right now; broadcasts are never retried.
            return

    def serve_forever(self, *, stop: threading.Event | None = None, poll_interval_s: float = 0.005) -> None:
        self.open()
        try:
            while stop is None or not stop.is_set():
                self.update()
                time.sleep(float(poll_interval_s))
        finally:
            self.close()


def start_server_thread(server: BroadcastServer) -> tuple[threading.Thread, threading.Event]:
    """Run a server on a daemon thread next to the game loop."""
    stop = threading.Event()
    thread = threading.Thread(
        target=server.serve_forever,
        kwargs={"stop": stop},
        name="dogchase-server",
        daemon=True,
    )
    thread.start()
    return thread, stop


__all__ = ["BroadcastServer", "ServerConfig", "start_server_thread"]
