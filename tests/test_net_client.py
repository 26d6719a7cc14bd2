from __future__ import annotations

from backyard.geom import Vec3
from dogchase.net.client import NetClient
from dogchase.net.protocol import Join, JoinResult, Leave, PlayerPose, Players, State
from dogchase.net.server import BroadcastServer, ServerConfig

from test_net_server import FakeTransport

SERVER = ("127.0.0.1", 31994)


def _client() -> tuple[NetClient, FakeTransport]:
    transport = FakeTransport()
    client = NetClient(name="Ava", host=SERVER[0], port=SERVER[1], transport=transport)
    client.open(now_ms=0)
    return client, transport


def _sent(transport: FakeTransport, kind: type) -> list:
    return [message for addr, message in transport.sent if isinstance(message, kind) and addr == SERVER]


def test_join_is_resent_until_answered() -> None:
    client, transport = _client()
    client.update(now_ms=0)
    client.update(now_ms=100)
    assert len(_sent(transport, Join)) == 1
    client.update(now_ms=200)
    assert len(_sent(transport, Join)) == 2
    assert _sent(transport, Join)[0].name == "Ava"

    transport.inbox = [(SERVER, JoinResult(ok=True, id="abc123", capacity=3))]
    client.update(now_ms=250)
    client.update(now_ms=1_000)
    assert client.joined is True
    assert client.player_id == "abc123"
    assert client.capacity == 3
    assert len(_sent(transport, Join)) == 2


def test_pose_is_streamed_at_a_limited_rate_after_joining() -> None:
    client, transport = _client()
    client.set_pose(Vec3(1.0, 0.0, -2.0), 0.5)
    client.update(now_ms=0)
    assert _sent(transport, State) == []

    transport.inbox = [(SERVER, JoinResult(ok=True, id="abc123", capacity=3))]
    client.update(now_ms=10)
    client.update(now_ms=30)
    client.update(now_ms=60)
    states = _sent(transport, State)
    assert len(states) == 2
    assert (states[0].x, states[0].z, states[0].yaw) == (1.0, -2.0, 0.5)


def test_roster_updates_exclude_own_entry_and_foreign_senders() -> None:
    client, transport = _client()
    transport.inbox = [
        (SERVER, JoinResult(ok=True, id="me", capacity=3)),
        (
            SERVER,
            Players(
                players=[
                    PlayerPose(id="me", name="Ava"),
                    PlayerPose(id="p2", name="Bo", x=3.0),
                ]
            ),
        ),
        (("10.9.9.9", 1), Players(players=[])),
    ]
    client.update(now_ms=0)
    assert [pose.name for pose in client.players] == ["Ava", "Bo"]
    assert [pose.name for pose in client.remote_players()] == ["Bo"]


def test_rejection_stops_join_attempts() -> None:
    client, transport = _client()
    transport.inbox = [(SERVER, JoinResult(ok=False, reason="full", capacity=3))]
    client.update(now_ms=0)
    client.update(now_ms=500)
    assert client.joined is False
    assert client.error == "full"
    assert _sent(transport, Join) == []


def test_silent_server_times_out() -> None:
    client, _transport = _client()
    client.update(now_ms=2_999)
    assert client.error == ""
    client.update(now_ms=3_000)
    assert client.error == "timeout"


def test_close_sends_leave_when_joined() -> None:
    client, transport = _client()
    transport.inbox = [(SERVER, JoinResult(ok=True, id="me", capacity=3))]
    client.update(now_ms=0)
    client.close()
    assert len(_sent(transport, Leave)) == 1
    assert transport.opened is False
    assert client.joined is False


def test_hostname_resolves_to_the_address_replies_come_from() -> None:
    transport = FakeTransport()
    client = NetClient(name="Ava", host="localhost", port=SERVER[1], transport=transport)
    client.open(now_ms=0)
    assert client.server_addr == SERVER

    transport.inbox = [(SERVER, JoinResult(ok=True, id="abc123", capacity=3))]
    client.update(now_ms=0)
    assert client.joined is True
    assert _sent(transport, Join) == []


def test_roster_without_own_entry_triggers_a_fresh_join() -> None:
    client, transport = _client()
    transport.inbox = [(SERVER, JoinResult(ok=True, id="old", capacity=3))]
    client.update(now_ms=0)
    assert client.joined is True

    transport.inbox = [(SERVER, Players(players=[PlayerPose(id="p2", name="Bo")]))]
    client.update(now_ms=50)
    assert client.joined is False
    assert len(_sent(transport, Join)) == 1

    transport.inbox = [(SERVER, JoinResult(ok=True, id="new", capacity=3))]
    client.update(now_ms=60)
    assert client.player_id == "new"


def _pump(
    client_transport: FakeTransport,
    server_transport: FakeTransport,
    client_addr: tuple[str, int],
) -> None:
    server_transport.inbox.extend((client_addr, message) for _addr, message in client_transport.sent)
    client_transport.sent.clear()
    client_transport.inbox.extend((SERVER, message) for addr, message in server_transport.sent if addr == client_addr)
    server_transport.sent.clear()


def test_client_rejoins_after_a_stall_longer_than_the_link_timeout() -> None:
    client_addr = ("127.0.0.1", 50001)
    client, client_transport = _client()
    server_transport = FakeTransport()
    server = BroadcastServer(ServerConfig(port=SERVER[1]), transport=server_transport)
    server.open()
    client.set_pose(Vec3(1.0, 0.0, 1.0), 0.0)

    client.update(now_ms=0)
    _pump(client_transport, server_transport, client_addr)
    server.update(now_ms=0)
    _pump(client_transport, server_transport, client_addr)
    client.update(now_ms=10)
    assert client.joined is True
    first_id = client.player_id

    # The game loop freezes while the server keeps ticking and drops the silent peer.
    for now in range(100, 3_600, 100):
        server.update(now_ms=now)
        _pump(client_transport, server_transport, client_addr)
    assert len(server.roster) == 0

    for now in range(3_600, 5_000, 50):
        client.update(now_ms=now)
        _pump(client_transport, server_transport, client_addr)
        server.update(now_ms=now)
        _pump(client_transport, server_transport, client_addr)

    assert client.error == ""
    assert client.joined is True
    assert client.player_id != first_id
    assert [pose.name for pose in server.roster.snapshot()] == ["Ava"]
