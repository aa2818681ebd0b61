import asyncio
import time

from constants import KEEPALIVE_INTERVAL
from logging_config import get_logger
from peer import Clock, Peer
from registry import RoomRegistry
from schemas.messages import PingEvent

logger = get_logger(__name__)


class LivenessSupervisor:
    """Pings every peer each `interval` seconds and evicts silent ones.

    A peer whose last pong is older than two intervals is removed from its
    room and its transport closed. Each peer has at most one pending timer;
    re-arming cancels the previous one.
    """

    def __init__(self, registry: RoomRegistry, interval: float = KEEPALIVE_INTERVAL, clock: Clock = time.monotonic):
        self.registry = registry
        self.interval = interval
        self.clock = clock

    def start(self, peer: Peer):
        self.keep_alive(peer)

    def keep_alive(self, peer: Peer):
        self.cancel(peer)
        if peer.connection.closed:
            return

        if self.clock() - peer.last_beat > 2 * self.interval:
            logger.info(f"{peer!r} missed its pongs, evicting")
            self.registry.leave(peer, terminate=True)
            peer.terminate()
            return

        peer.send(PingEvent())
        peer.timer = asyncio.get_running_loop().call_later(self.interval, self.keep_alive, peer)

    def cancel(self, peer: Peer):
        peer.cancel_timer()
