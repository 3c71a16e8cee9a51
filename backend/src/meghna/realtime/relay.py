"""Persist-then-forward delivery of direct messages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from fastapi.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from app.schemas.messages import MessageRead

from .presence import PresenceRegistry
from .protocol import build_message_envelope

logger = logging.getLogger(__name__)


class MessageStore(Protocol):
    """Persistence used by the relay; must assign the id and timestamp."""

    async def append(
        self,
        sender_id: int,
        receiver_id: int,
        content: str,
        attachment: str | None = None,
    ) -> MessageRead:
        ...


async def safe_send_json(websocket: WebSocket, data: dict[str, Any]) -> bool:
    """Send JSON through *websocket*, returning False instead of raising on a dead socket."""

    if websocket.application_state != WebSocketState.CONNECTED:
        return False
    try:
        await websocket.send_json(data)
        return True
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.debug("Failed to send websocket message: %s", e)
        return False


@dataclass(slots=True)
class DeliveryReport:
    message: MessageRead
    envelope: dict[str, Any]
    forwarded: bool
    echoed: bool


class MessageRelay:
    """Owns the presence registry and fans persisted messages out to live channels."""

    def __init__(self, store: MessageStore, registry: PresenceRegistry | None = None) -> None:
        self.store = store
        self.registry = registry or PresenceRegistry()

    async def deliver(
        self,
        sender_id: int,
        receiver_id: int,
        content: str,
        attachment: str | None = None,
        *,
        origin: WebSocket | None = None,
    ) -> DeliveryReport:
        """Persist a message, forward it to the receiver and echo it to the sender.

        Persistence happens first; if it fails nothing is sent. Forwarding is
        best effort and never retried, the stored copy is what the receiver
        sees on the next history fetch. The echo goes to *origin* when given,
        otherwise to whatever channel the sender currently has registered.
        """

        message = await self.store.append(sender_id, receiver_id, content, attachment)
        envelope = build_message_envelope(message)

        delivered_to: list[WebSocket] = []

        forwarded = False
        receiver_channel = await self.registry.lookup(receiver_id)
        if receiver_channel is not None:
            forwarded = await safe_send_json(receiver_channel, envelope)
            if forwarded:
                delivered_to.append(receiver_channel)
            else:
                logger.info("Dropped live delivery of message %s to user %s", message.id, receiver_id)

        echo_channel = origin if origin is not None else await self.registry.lookup(sender_id)
        echoed = False
        if echo_channel is not None:
            if any(channel is echo_channel for channel in delivered_to):
                echoed = True
            else:
                echoed = await safe_send_json(echo_channel, envelope)

        logger.debug(
            "Message %s from %s to %s persisted (forwarded=%s, echoed=%s)",
            message.id,
            sender_id,
            receiver_id,
            forwarded,
            echoed,
        )
        return DeliveryReport(message=message, envelope=envelope, forwarded=forwarded, echoed=echoed)
