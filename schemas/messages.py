from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator


class PeerName(BaseModel):
    model: Optional[str] = None
    os: Optional[str] = None
    browser: Optional[str] = None
    type: Optional[str] = None
    deviceName: str
    displayName: str

class PeerInfo(BaseModel):
    id: str
    name: PeerName
    rtcSupported: bool

class RoomState(BaseModel):
    room: str
    useLocalRoom: bool = False

    @field_validator("room", mode="before")
    @classmethod
    def _coerce_room(cls, value: Any) -> str:
        if value is None:
            raise ValueError("room is required")
        return str(value)

    @field_validator("useLocalRoom", mode="before")
    @classmethod
    def _coerce_use_local_room(cls, value: Any) -> bool:
        return bool(value)

class DisconnectMessage(BaseModel):
    type: Literal["disconnect"]

class PongMessage(BaseModel):
    type: Literal["pong"]

class ChangeRoomMessage(BaseModel):
    type: Literal["changeRoom"]
    roomState: RoomState

ControlMessage = Annotated[
    Union[DisconnectMessage, PongMessage, ChangeRoomMessage],
    Field(discriminator="type"),
]

control_message_adapter = TypeAdapter(ControlMessage)

CONTROL_TYPES = frozenset({"disconnect", "pong", "changeRoom"})

class DisplayName(BaseModel):
    displayName: str
    deviceName: str

class DisplayNameEvent(BaseModel):
    type: Literal["display-name"] = "display-name"
    message: DisplayName

class RoomEvent(BaseModel):
    type: Literal["room"] = "room"
    message: RoomState

class PeersEvent(BaseModel):
    type: Literal["peers"] = "peers"
    peers: List[PeerInfo]

class PeerJoinedEvent(BaseModel):
    type: Literal["peer-joined"] = "peer-joined"
    peer: PeerInfo

class PeerLeftEvent(BaseModel):
    type: Literal["peer-left"] = "peer-left"
    peerId: str

class PingEvent(BaseModel):
    type: Literal["ping"] = "ping"

class RoomStatsResponse(BaseModel):
    rooms: int
    peers: int
    drops: dict[str, int]
