from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from routers.rooms import rooms_router
import time
from typing import Optional
from logging_config import get_logger, setup_logging
import os

import identity
import naming
from connection import Connection
from constants import KEEPALIVE_INTERVAL, USE_GLOBAL_ROOM_BY_DEFAULT
from keepalive import LivenessSupervisor
from peer import Clock, Peer, client_ip
from registry import RoomRegistry
from relay import RelayDispatcher
from schemas.messages import DisplayName, DisplayNameEvent
from stats import RelayStats

# Setup logging
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE", None)
setup_logging(log_level=log_level, log_file=log_file)
logger = get_logger(__name__)

app = FastAPI()

# Configure CORS to allow all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins
    allow_credentials=True,
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)

app.include_router(rooms_router)


def init_state(
    target: FastAPI,
    use_global_room_by_default: bool = USE_GLOBAL_ROOM_BY_DEFAULT,
    keepalive_interval: float = KEEPALIVE_INTERVAL,
    clock: Optional[Clock] = None,
):
    """(Re)build the relay services owned by an application instance."""
    clock = clock or time.monotonic
    registry = RoomRegistry()
    stats = RelayStats()
    target.state.clock = clock
    target.state.registry = registry
    target.state.stats = stats
    target.state.dispatcher = RelayDispatcher(registry, stats, clock=clock)
    target.state.supervisor = LivenessSupervisor(registry, interval=keepalive_interval, clock=clock)
    target.state.use_global_room_by_default = use_global_room_by_default


init_state(app)

logger.info("FastAPI application initialized")


@app.websocket("/server")
@app.websocket("/server/{channel}")
async def websocket_endpoint(websocket: WebSocket):
    """Signaling WebSocket.

    Path marker:
    - /server/webrtc: client supports direct peer channels
    - /server/fallback or /server: it does not
    """
    state = websocket.app.state
    registry: RoomRegistry = state.registry

    peer_id, is_new = identity.resolve_peer_id(websocket.cookies)
    headers = [identity.sticky_cookie_header(peer_id)] if is_new else None

    await websocket.accept(headers=headers)

    connection = Connection(websocket, stats=state.stats)
    connection.start()

    peer = Peer(
        connection,
        peer_id=peer_id,
        ip=client_ip(websocket),
        name=naming.derive_name(peer_id, websocket.headers.get("user-agent")),
        rtc_supported="webrtc" in websocket.url.path,
        use_local_room=not state.use_global_room_by_default,
        clock=state.clock,
    )
    logger.info(f"{peer!r} connected (new identity: {is_new})")

    try:
        state.supervisor.start(peer)
        peer.send(DisplayNameEvent(message=DisplayName(
            displayName=peer.name.displayName,
            deviceName=peer.name.deviceName,
        )))
        registry.join(peer)
        registry.send_room(peer)

        message_count = 0
        while not connection.closed:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"{peer!r} disconnected")
                break
            message_count += 1
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            logger.debug(f"Received frame #{message_count} from {peer!r}")
            state.dispatcher.handle_frame(peer, raw)
    except WebSocketDisconnect:
        logger.info(f"{peer!r} disconnected")
    except Exception as e:
        logger.error(f"WebSocket error for {peer!r}: {e}", exc_info=True)
    finally:
        registry.leave(peer, terminate=True)
        peer.terminate()
        await connection.wait_closed()
        logger.debug(f"{peer!r} cleaned up")
