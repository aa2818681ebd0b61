import asyncio
import time
from typing import Callable, Optional, Union

from fastapi import WebSocket
from pydantic import BaseModel

from constants import GLOBAL_ROOM_NAME
from schemas.messages import PeerInfo, PeerName, RoomState

Clock = Callable[[], float]

LOCALHOST_ALIASES = {"::1", "::ffff:127.0.0.1"}


def client_ip(websocket: WebSocket) -> str:
    """Remote address of a handshake, honouring the first X-Forwarded-For hop."""
    forwarded = websocket.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    elif websocket.client is not None:
        ip = websocket.client.host
    else:
        ip = ""
    # IPv4 and IPv6 spell localhost differently
    if ip in LOCALHOST_ALIASES:
        ip = "127.0.0.1"
    return ip


class Peer:
    """State for one connected client.

    `room` and `use_local_room` describe what the client asked for; the key
    the peer is actually filed under is always computed by `get_room()`.
    """

    def __init__(
        self,
        connection,
        peer_id: str,
        ip: str,
        name: PeerName,
        rtc_supported: bool = False,
        use_local_room: bool = True,
        clock: Clock = time.monotonic,
    ):
        self.connection = connection
        self.id = peer_id
        self.ip = ip
        self.name = name
        self.rtc_supported = rtc_supported
        self.room = GLOBAL_ROOM_NAME
        self.use_local_room = use_local_room
        self.last_beat = clock()
        self.timer: Optional[asyncio.TimerHandle] = None

    def __repr__(self):
        return f"<Peer id={self.id} ip={self.ip} rtcSupported={self.rtc_supported}>"

    def get_room(self) -> str:
        if self.use_local_room:
            return self.ip
        return self.room

    def set_room(self, room_state: RoomState):
        self.room = room_state.room
        self.use_local_room = room_state.useLocalRoom

    def room_state(self) -> RoomState:
        return RoomState(room=self.room, useLocalRoom=self.use_local_room)

    def get_info(self) -> PeerInfo:
        return PeerInfo(id=self.id, name=self.name, rtcSupported=self.rtc_supported)

    def send(self, message: Union[BaseModel, dict]):
        if isinstance(message, BaseModel):
            message = message.model_dump(exclude_none=True)
        self.connection.send(message)

    def cancel_timer(self):
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    def terminate(self):
        self.cancel_timer()
        self.connection.close()
