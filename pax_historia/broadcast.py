"""Push notifications to connected WebSocket observers.

Message types: ``new_action``, ``time_advance_start``,
``time_advance_complete``, ``diplomatic_message``. Delivery is best-effort:
a client whose send fails is dropped.
"""

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class Broadcaster:
    def __init__(self) -> None:
        self._clients: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def register(self, ws: WebSocket) -> None:
        await ws.accept()
        async with self._lock:
            self._clients.add(ws)

    async def unregister(self, ws: WebSocket) -> None:
        async with self._lock:
            self._clients.discard(ws)

    async def broadcast(self, message: dict[str, Any]) -> None:
        dead = []
        for ws in list(self._clients):
            try:
                await ws.send_json(message)
            except Exception as e:  # any send failure means the socket is gone
                logger.debug("dropping websocket client: %s", e)
                dead.append(ws)
        for ws in dead:
            await self.unregister(ws)
