import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))

GLOBAL_ROOM_NAME = "__GLOBAL_ROOM__"
USE_GLOBAL_ROOM_BY_DEFAULT = os.getenv("USE_GLOBAL_ROOM_BY_DEFAULT") == "true"

# Probe period in seconds; a peer is evicted after two silent periods
KEEPALIVE_INTERVAL = float(os.getenv("KEEPALIVE_INTERVAL", 30))

PEER_ID_COOKIE = "peerid"
