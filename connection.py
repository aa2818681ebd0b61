import asyncio
import json
from typing import Optional

from fastapi import WebSocket

from logging_config import get_logger
from stats import SEND_FAILED, RelayStats

logger = get_logger(__name__)


class Connection:
    """Transport handle owned by exactly one peer.

    `send` never awaits: frames are queued and written by a background task,
    so callers holding room state are never suspended mid-operation. Once the
    connection is closed every further send is a no-op.

    `close` terminates right away: frames still queued are discarded and a
    write blocked on a client that stopped reading is cancelled.
    """

    def __init__(self, websocket: WebSocket, stats: Optional[RelayStats] = None):
        self.websocket = websocket
        self.stats = stats
        self._queue: asyncio.Queue = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None
        self._closer: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self):
        if self._writer is None and not self._closed:
            self._writer = asyncio.create_task(self._drain())

    def send(self, message: dict):
        if self._closed:
            return
        self._queue.put_nowait(json.dumps(message))

    def close(self):
        if self._closed:
            return
        self._closed = True
        if self._writer is not None:
            self._writer.cancel()
        self._closer = asyncio.create_task(self._close_socket())

    async def wait_closed(self):
        tasks = [task for task in (self._writer, self._closer) if task is not None]
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _close_socket(self):
        try:
            await self.websocket.close()
        except Exception as e:
            # Already closed by the client
            logger.debug(f"Error closing WebSocket: {e}")

    async def _drain(self):
        while True:
            item = await self._queue.get()
            try:
                await self.websocket.send_text(item)
            except Exception as e:
                if self.stats is not None:
                    self.stats.record_drop(SEND_FAILED, str(e))
                else:
                    logger.debug(f"Send failed: {e}")
