"""Per-connection chat protocol handling."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from fastapi.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from app.core.errors import ServiceError

from .protocol import (
    AuthFrame,
    ChannelState,
    FrameError,
    KeepaliveFrame,
    SendFrame,
    error_frame,
    parse_frame,
)
from .relay import MessageRelay, safe_send_json

logger = logging.getLogger(__name__)

HandshakeResolver = Callable[[AuthFrame], Awaitable[int]]
"""Maps an auth frame to a user id, raising ServiceError when it is not acceptable."""


async def receive_text_frame(websocket: WebSocket) -> str:
    """Receive the next frame as text, decoding binary frames as UTF-8."""

    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", 1000))
    text = message.get("text")
    if text is None:
        text = (message.get("bytes") or b"").decode("utf-8", errors="replace")
    return text


async def iter_keepalive_messages(
    websocket: WebSocket,
    receiver: Callable[[], Awaitable[str]],
    *,
    timeout_seconds: float | int | None,
    ping_interval_seconds: float | int | None,
    ping_payload: dict[str, Any] | None = None,
) -> AsyncIterator[str]:
    """Yield frames from *receiver*, pinging the client whenever it goes quiet."""

    ping_payload = ping_payload or {"type": "ping"}
    timeout = float(timeout_seconds) if timeout_seconds else 0.0
    interval = float(ping_interval_seconds) if ping_interval_seconds else 0.0
    last_ping_sent: float | None = None

    while True:
        try:
            if timeout > 0:
                message = await asyncio.wait_for(receiver(), timeout=timeout)
            else:
                message = await receiver()
        except asyncio.TimeoutError:
            if websocket.application_state != WebSocketState.CONNECTED:
                break
            now = time.monotonic()
            if last_ping_sent is None or now - last_ping_sent >= interval:
                if not await safe_send_json(websocket, ping_payload):
                    break
                last_ping_sent = now
            continue
        except (RuntimeError, WebSocketDisconnect):
            break
        last_ping_sent = None
        yield message


class ChatSession:
    """State machine for one chat socket: unauthenticated, authenticated, closed."""

    def __init__(
        self,
        websocket: WebSocket,
        relay: MessageRelay,
        resolve_handshake: HandshakeResolver,
        *,
        max_content_length: int | None = None,
    ) -> None:
        self.websocket = websocket
        self.relay = relay
        self.resolve_handshake = resolve_handshake
        self.max_content_length = max_content_length
        self.state = ChannelState.UNAUTHENTICATED
        self.user_id: int | None = None

    async def send_error(self, code: str, detail: str) -> None:
        await safe_send_json(self.websocket, error_frame(code, detail))

    async def handle_text(self, raw: str) -> None:
        if self.state is ChannelState.CLOSED:
            return
        try:
            frame = parse_frame(raw, max_content_length=self.max_content_length)
        except FrameError as exc:
            await self.send_error(exc.code, exc.detail)
            return

        if isinstance(frame, KeepaliveFrame):
            if frame.type == "ping":
                await safe_send_json(self.websocket, {"type": "pong"})
            return

        try:
            if isinstance(frame, AuthFrame):
                await self._authenticate(frame)
            elif isinstance(frame, SendFrame):
                await self._send(frame)
        except ServiceError as exc:
            await self.send_error(exc.code, exc.detail)

    async def _authenticate(self, frame: AuthFrame) -> None:
        if self.state is ChannelState.AUTHENTICATED:
            await self.send_error("already_authenticated", "Channel is already authenticated")
            return

        user_id = await self.resolve_handshake(frame)
        self.user_id = user_id
        self.state = ChannelState.AUTHENTICATED
        await self.relay.registry.register(user_id, self.websocket)
        logger.info("Chat channel authenticated for user %s", user_id)
        await safe_send_json(self.websocket, {"type": "auth_ok", "userId": user_id})

    async def _send(self, frame: SendFrame) -> None:
        if self.state is not ChannelState.AUTHENTICATED or self.user_id is None:
            await self.send_error("unauthorized", "Authenticate before sending messages")
            return
        await self.relay.deliver(
            self.user_id,
            frame.receiver_id,
            frame.content,
            frame.attachment,
            origin=self.websocket,
        )

    async def close(self) -> None:
        if self.state is ChannelState.CLOSED:
            return
        if self.user_id is not None:
            removed = await self.relay.registry.unregister(self.user_id, self.websocket)
            if not removed:
                logger.debug("Channel for user %s closed after being superseded", self.user_id)
        self.state = ChannelState.CLOSED
