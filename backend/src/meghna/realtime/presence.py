"""Registry mapping online users to their live chat channel."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict

from fastapi.websockets import WebSocket, WebSocketState

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Tracks at most one WebSocket per user.

    A newer registration for the same user replaces the older one without
    closing it; the older socket simply stops receiving routed messages.
    Entries are process local and vanish on restart.
    """

    def __init__(self) -> None:
        self._channels: Dict[int, WebSocket] = {}
        self._lock = asyncio.Lock()

    async def register(self, user_id: int, websocket: WebSocket) -> WebSocket | None:
        """Route *user_id* to *websocket*, returning the evicted socket if any."""

        async with self._lock:
            previous = self._channels.get(user_id)
            self._channels[user_id] = websocket
        if previous is not None and previous is not websocket:
            logger.info("User %s opened a new chat channel; previous channel evicted", user_id)
            return previous
        return None

    async def unregister(self, user_id: int, websocket: WebSocket) -> bool:
        """Remove the entry only while it still points at *websocket*."""

        async with self._lock:
            if self._channels.get(user_id) is not websocket:
                return False
            del self._channels[user_id]
            return True

    async def lookup(self, user_id: int) -> WebSocket | None:
        async with self._lock:
            websocket = self._channels.get(user_id)
        if websocket is None or websocket.application_state != WebSocketState.CONNECTED:
            return None
        return websocket

    async def online_user_ids(self) -> set[int]:
        async with self._lock:
            return set(self._channels)

    async def clear(self) -> None:
        async with self._lock:
            self._channels.clear()
