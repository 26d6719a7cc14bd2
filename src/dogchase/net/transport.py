from __future__ import annotations

import socket
from dataclasses import dataclass, field
from typing import Protocol

import msgspec

from ..debug_log import debug_log
from .protocol import NetMessage, decode_message, encode_message


PeerAddr = tuple[str, int]

# Roster datagrams are tiny; anything bigger than this is not ours.
MAX_DATAGRAM = 4096


class MessageTransport(Protocol):
    def open(self) -> None: ...

    def close(self) -> None: ...

    def send_message(self, addr: PeerAddr, message: NetMessage) -> None: ...

    def recv_messages(self) -> list[tuple[PeerAddr, NetMessage]]: ...


@dataclass(slots=True)
class UdpTransport:
    """Non-blocking UDP socket speaking msgpack-encoded roster messages."""

    bind_host: str
    bind_port: int
    _sock: socket.socket | None = field(init=False, default=None)
    dropped: int = field(init=False, default=0)

    @property
    def bound_port(self) -> int:
        if self._sock is None:
            return int(self.bind_port)
        _host, port = self._sock.getsockname()[:2]
        return int(port)

    def open(self) -> None:
        if self._sock is not None:
            return
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setblocking(False)
            sock.bind((str(self.bind_host), int(self.bind_port)))
        except OSError:
            sock.close()
            raise
        self._sock = sock

    def close(self) -> None:
        sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()

    def send_message(self, addr: PeerAddr, message: NetMessage) -> None:
        if self._sock is None:
            raise RuntimeError("transport is not open")
        host, port = addr
        self._sock.sendto(encode_message(message), (str(host), int(port)))

    def recv_messages(self) -> list[tuple[PeerAddr, NetMessage]]:
        """Drain every queued datagram; undecodable ones are counted and skipped."""
        sock = self._sock
        received: list[tuple[PeerAddr, NetMessage]] = []
        while sock is not None:
            try:
                blob, raw_addr = sock.recvfrom(MAX_DATAGRAM)
            except (BlockingIOError, InterruptedError):
                break
            except OSError as exc:
                # Windows reports ICMP port-unreachable from an earlier send here.
                debug_log("net_recv_error", port=self.bound_port, error=str(exc))
                break
            peer: PeerAddr = (str(raw_addr[0]), int(raw_addr[1]))
            try:
                received.append((peer, decode_message(blob)))
            except msgspec.DecodeError:
                self.dropped += 1
        return received
