import uuid
from typing import Mapping, Optional, Tuple

from constants import PEER_ID_COOKIE


def mint_peer_id() -> str:
    """Fresh random identity shaped like a UUID v4."""
    return str(uuid.uuid4())


def resolve_peer_id(cookies: Mapping[str, str]) -> Tuple[str, bool]:
    """Return ``(peer_id, is_new)`` for a handshake.

    A previously issued id echoed back in the sticky cookie is reused as is,
    which keeps the identity stable across reconnects of the same browser.
    """
    peer_id: Optional[str] = cookies.get(PEER_ID_COOKIE)
    if peer_id:
        return peer_id, False
    return mint_peer_id(), True


def sticky_cookie_header(peer_id: str) -> Tuple[bytes, bytes]:
    value = f"{PEER_ID_COOKIE}={peer_id}; SameSite=Strict; Secure"
    return b"set-cookie", value.encode("latin-1")
