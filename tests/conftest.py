import itertools

import pytest

from app import app, init_state
from peer import Peer
from registry import RoomRegistry
from relay import RelayDispatcher
from schemas.messages import PeerName
from stats import RelayStats


class FakeConnection:
    """Records frames instead of writing them to a socket."""

    def __init__(self):
        self.sent = []
        self.closed = False
        self.close_calls = 0

    def send(self, message):
        if self.closed:
            return
        self.sent.append(message)

    def close(self):
        self.close_calls += 1
        self.closed = True

    def of_type(self, type_):
        return [m for m in self.sent if m.get("type") == type_]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def registry():
    return RoomRegistry()


@pytest.fixture()
def stats():
    return RelayStats()


@pytest.fixture()
def dispatcher(registry, stats, clock):
    return RelayDispatcher(registry, stats, clock=clock)


@pytest.fixture()
def make_peer(clock):
    counter = itertools.count(1)

    def _make(peer_id=None, ip="10.0.0.1", use_local_room=False, room=None, rtc_supported=True):
        n = next(counter)
        peer_id = peer_id or f"peer-{n}"
        peer = Peer(
            FakeConnection(),
            peer_id=peer_id,
            ip=ip,
            name=PeerName(deviceName="Linux Firefox", displayName=f"Peer {n}", os="Linux", browser="Firefox"),
            rtc_supported=rtc_supported,
            use_local_room=use_local_room,
            clock=clock,
        )
        if room is not None:
            peer.room = room
        return peer

    return _make


@pytest.fixture()
def fresh_app():
    init_state(app, use_global_room_by_default=False, keepalive_interval=30)
    yield app
    init_state(app)
