import json
import time
from typing import Union

from pydantic import ValidationError

from logging_config import get_logger
from peer import Clock, Peer
from registry import RoomRegistry
from schemas.messages import (
    CONTROL_TYPES,
    ChangeRoomMessage,
    DisconnectMessage,
    PongMessage,
    control_message_adapter,
)
from stats import INVALID_CONTROL, MALFORMED_FRAME, NO_ROOM, UNKNOWN_RECIPIENT, RelayStats

logger = get_logger(__name__)


class RelayDispatcher:
    """Interprets inbound frames from a peer and forwards relay payloads.

    Malformed frames and unknown recipients are dropped without telling the
    sender; each drop is counted in `RelayStats`.
    """

    def __init__(self, registry: RoomRegistry, stats: RelayStats, clock: Clock = time.monotonic):
        self.registry = registry
        self.stats = stats
        self.clock = clock

    def handle_frame(self, sender: Peer, raw: Union[str, bytes]):
        # Frame read just before the peer was terminated
        if sender.connection.closed:
            return

        try:
            message = json.loads(raw)
        except (ValueError, TypeError):
            self.stats.record_drop(MALFORMED_FRAME, f"from {sender!r}")
            return
        if not isinstance(message, dict):
            self.stats.record_drop(MALFORMED_FRAME, f"non-object frame from {sender!r}")
            return

        if message.get("type") in CONTROL_TYPES:
            self._handle_control(sender, message)

        if message.get("to"):
            self._relay(sender, message)

    def _handle_control(self, sender: Peer, message: dict):
        try:
            control = control_message_adapter.validate_python(message)
        except ValidationError as e:
            self.stats.record_drop(INVALID_CONTROL, f"from {sender!r}: {e.error_count()} errors")
            return

        if isinstance(control, DisconnectMessage):
            logger.info(f"{sender!r} requested disconnect")
            self.registry.leave(sender, terminate=True)
        elif isinstance(control, PongMessage):
            sender.last_beat = self.clock()
        elif isinstance(control, ChangeRoomMessage):
            logger.debug(f"{sender!r} changing room to {control.roomState}")
            self.registry.move(sender, control.roomState)
        else:
            raise TypeError(f"Unhandled control message {control!r}")

    def _relay(self, sender: Peer, message: dict):
        key = sender.get_room()
        if not self.registry.has_room(key):
            self.stats.record_drop(NO_ROOM, f"{sender!r} is not in a room")
            return

        recipient_id = str(message["to"])
        recipient = self.registry.get_peer(key, recipient_id)
        if recipient is None:
            self.stats.record_drop(UNKNOWN_RECIPIENT, f"{recipient_id} from {sender!r}")
            return

        payload = {k: v for k, v in message.items() if k != "to"}
        payload["sender"] = sender.id
        recipient.send(payload)
        logger.debug(f"Relayed {payload.get('type', 'message')} from {sender.id} to {recipient.id}")
