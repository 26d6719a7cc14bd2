from __future__ import annotations

from dataclasses import dataclass, field
import time

import pytest

from dogchase.net.client import NetClient
from dogchase.net.protocol import Join, JoinResult, Leave, NetMessage, Players, State
from dogchase.net.server import BroadcastServer, ServerConfig, start_server_thread
from dogchase.net.transport import PeerAddr

AVA = ("10.0.0.1", 40001)
BO = ("10.0.0.2", 40002)
CY = ("10.0.0.3", 40003)
DEE = ("10.0.0.4", 40004)


@dataclass(slots=True)
class FakeTransport:
    inbox: list[tuple[PeerAddr, NetMessage]] = field(default_factory=list)
    sent: list[tuple[PeerAddr, NetMessage]] = field(default_factory=list)
    opened: bool = False

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.opened = False

    def send_message(self, addr: PeerAddr, message: NetMessage) -> None:
        self.sent.append((addr, message))

    def recv_messages(self) -> list[tuple[PeerAddr, NetMessage]]:
        out = list(self.inbox)
        self.inbox.clear()
        return out


def _server() -> tuple[BroadcastServer, FakeTransport]:
    transport = FakeTransport()
    server = BroadcastServer(ServerConfig(port=0), transport=transport)
    server.open()
    return server, transport


def _join_results(transport: FakeTransport) -> dict[PeerAddr, JoinResult]:
    return {addr: message for addr, message in transport.sent if isinstance(message, JoinResult)}


def _broadcasts(transport: FakeTransport) -> list[tuple[PeerAddr, Players]]:
    return [(addr, message) for addr, message in transport.sent if isinstance(message, Players)]


def test_disconnected_player_is_missing_from_next_broadcast() -> None:
    server, transport = _server()
    transport.inbox = [(AVA, Join(name="Ava")), (BO, Join(name="Bo")), (CY, Join(name="Cy"))]
    server.update(now_ms=1_000)

    results = _join_results(transport)
    assert all(results[addr].ok for addr in (AVA, BO, CY))
    first = _broadcasts(transport)
    assert {addr for addr, _ in first} == {AVA, BO, CY}
    assert sorted(pose.name for pose in first[0][1].players) == ["Ava", "Bo", "Cy"]

    transport.sent.clear()
    transport.inbox = [(AVA, Leave(reason="quit"))]
    server.update(now_ms=1_100)

    after = _broadcasts(transport)
    assert {addr for addr, _ in after} == {BO, CY}
    assert sorted(pose.name for pose in after[0][1].players) == ["Bo", "Cy"]


def test_fourth_join_is_rejected_until_a_slot_frees() -> None:
    server, transport = _server()
    transport.inbox = [
        (AVA, Join(name="Ava")),
        (BO, Join(name="Bo")),
        (CY, Join(name="Cy")),
        (DEE, Join(name="Dee")),
    ]
    server.update(now_ms=0)
    rejected = _join_results(transport)[DEE]
    assert rejected.ok is False
    assert rejected.reason == "full"
    assert len(server.roster) == 3

    transport.sent.clear()
    transport.inbox = [(BO, Leave()), (DEE, Join(name="Dee"))]
    server.update(now_ms=10)
    assert _join_results(transport)[DEE].ok is True
    assert sorted(pose.name for pose in server.roster.snapshot()) == ["Ava", "Cy", "Dee"]


def test_broadcast_runs_on_a_fixed_interval() -> None:
    server, transport = _server()
    transport.inbox = [(AVA, Join(name="Ava"))]
    server.update(now_ms=0)
    server.update(now_ms=50)
    server.update(now_ms=99)
    assert server.broadcasts_sent == 1
    server.update(now_ms=100)
    server.update(now_ms=150)
    server.update(now_ms=200)
    assert server.broadcasts_sent == 3
    assert len(_broadcasts(transport)) == 3


def test_state_updates_pose_and_is_ignored_before_join() -> None:
    server, transport = _server()
    transport.inbox = [
        (BO, State(x=5.0, y=0.0, z=5.0, yaw=1.0)),
        (AVA, Join(name="Ava")),
        (AVA, State(x=1.0, y="bad", z=-3.0, yaw=float("nan"))),
    ]
    server.update(now_ms=0)
    poses = _broadcasts(transport)[-1][1].players
    assert len(poses) == 1
    pose = poses[0]
    assert (pose.name, pose.x, pose.y, pose.z, pose.yaw) == ("Ava", 1.0, 0.0, -3.0, 0.0)


def test_silent_connections_time_out() -> None:
    server, transport = _server()
    transport.inbox = [(AVA, Join(name="Ava")), (BO, Join(name="Bo"))]
    server.update(now_ms=0)
    transport.inbox = [(BO, State(x=1.0))]
    server.update(now_ms=2_000)

    server.update(now_ms=3_000)
    assert AVA not in server.connections
    assert BO in server.connections
    assert [pose.name for pose in server.roster.snapshot()] == ["Bo"]


def test_name_rejection_is_reported_to_the_sender() -> None:
    server, transport = _server()
    transport.inbox = [(AVA, Join(name="   ")), (BO, Join(name=42))]
    server.update(now_ms=0)
    results = _join_results(transport)
    assert results[AVA].ok is False
    assert results[AVA].reason == "name"
    assert results[BO].ok is True
    assert len(server.roster) == 1


def test_close_clears_connections_and_roster() -> None:
    server, transport = _server()
    transport.inbox = [(AVA, Join(name="Ava"))]
    server.update(now_ms=0)
    server.close()
    assert transport.opened is False
    assert server.connections == {}
    assert len(server.roster) == 0


@pytest.mark.net
@pytest.mark.parametrize("host", ["127.0.0.1", "localhost"])
def test_loopback_server_thread_and_client_roundtrip(host: str) -> None:
    server = BroadcastServer(ServerConfig(bind_host="127.0.0.1", port=0))
    server.open()
    port = server.bound_port
    thread, stop = start_server_thread(server)
    client = NetClient(name="Ava", host=host, port=port)
    try:
        client.open()
        deadline = time.monotonic() + 3.0
        while time.monotonic() < deadline and not client.players:
            client.update()
            time.sleep(0.01)
        assert client.joined is True
        assert [pose.name for pose in client.players] == ["Ava"]
    finally:
        client.close()
        stop.set()
        thread.join(timeout=2.0)
