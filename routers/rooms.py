from fastapi import APIRouter, Request
from schemas.messages import RoomStatsResponse
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/stats")
async def room_stats(request: Request) -> RoomStatsResponse:
    # Response 200: { "rooms": 2, "peers": 5, "drops": { "malformed_frame": 1 } }
    # Counts only; room keys can be client addresses and are never exposed.
    state = request.app.state
    stats = RoomStatsResponse(
        rooms=state.registry.room_count(),
        peers=state.registry.peer_count(),
        drops=state.stats.drops(),
    )
    logger.debug(f"Room stats requested from {request.client.host if request.client else 'unknown'}: {stats}")
    return stats
