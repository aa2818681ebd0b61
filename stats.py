from collections import Counter
from typing import Dict

from logging_config import get_logger

logger = get_logger(__name__)

MALFORMED_FRAME = "malformed_frame"
INVALID_CONTROL = "invalid_control"
UNKNOWN_RECIPIENT = "unknown_recipient"
NO_ROOM = "no_room"
SEND_FAILED = "send_failed"


class RelayStats:
    """Counters for every point where the relay silently drops something.

    Clients are never told about a drop; these counters and the DEBUG log
    lines are the only trace.
    """

    def __init__(self):
        self._drops: Counter = Counter()

    def record_drop(self, reason: str, detail: str = ""):
        self._drops[reason] += 1
        logger.debug(f"Dropped ({reason}) {detail}".rstrip())

    def drops(self) -> Dict[str, int]:
        return dict(self._drops)
