from typing import Dict, List, Optional

from logging_config import get_logger
from peer import Peer
from schemas.messages import PeerJoinedEvent, PeerLeftEvent, PeersEvent, RoomEvent, RoomState

logger = get_logger(__name__)


class RoomRegistry:
    """In-memory rooms keyed by effective room key.

    Every method is synchronous and peer sends only enqueue, so on a single
    event loop each operation runs to completion without interleaving.
    A room present in the registry always has at least one member.
    """

    def __init__(self):
        self._rooms: Dict[str, Dict[str, Peer]] = {}

    def join(self, peer: Peer):
        key = peer.get_room()

        existing = self._rooms.get(key, {}).get(peer.id)
        if existing is not None and existing is not peer:
            logger.info(f"Replacing stale {existing!r} in room {key}")
            self.leave(existing, terminate=True)

        # if room doesn't exist, create it
        room = self._rooms.setdefault(key, {})

        # notify all other peers before the newcomer sees the member list
        joined = PeerJoinedEvent(peer=peer.get_info())
        for other in room.values():
            other.send(joined)

        peer.send(PeersEvent(peers=[other.get_info() for other in room.values()]))

        room[peer.id] = peer
        logger.debug(f"{peer!r} joined room {key} ({len(room)} members)")

    def leave(self, peer: Peer, terminate: bool = True):
        key = peer.get_room()
        room = self._rooms.get(key)
        if room is None or room.get(peer.id) is not peer:
            return
        if terminate:
            peer.terminate()

        del room[peer.id]

        if not room:
            del self._rooms[key]
            logger.debug(f"Room {key} is empty, removed")
            return

        left = PeerLeftEvent(peerId=peer.id)
        for other in room.values():
            other.send(left)
        logger.debug(f"{peer!r} left room {key} ({len(room)} members)")

    def move(self, peer: Peer, room_state: RoomState):
        self.leave(peer, terminate=False)
        peer.set_room(room_state)
        self.join(peer)
        self.send_room(peer)

    def send_room(self, peer: Peer):
        peer.send(RoomEvent(message=peer.room_state()))

    def get_peer(self, key: str, peer_id: str) -> Optional[Peer]:
        room = self._rooms.get(key)
        if room is None:
            return None
        return room.get(peer_id)

    def has_room(self, key: str) -> bool:
        return key in self._rooms

    def members(self, key: str) -> List[Peer]:
        return list(self._rooms.get(key, {}).values())

    def room_count(self) -> int:
        return len(self._rooms)

    def peer_count(self) -> int:
        return sum(len(room) for room in self._rooms.values())
