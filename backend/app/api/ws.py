"""WebSocket endpoint for real-time direct messaging."""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket

from app.config import get_settings
from app.core.errors import NotFound, Unauthorized
from app.core.security import decode_access_token, token_subject
from app.database import get_db_session
from app.models import User
from meghna.realtime import (
    AuthFrame,
    ChatSession,
    MessageRelay,
    iter_keepalive_messages,
    receive_text_frame,
)

router = APIRouter(prefix="/ws", tags=["ws"])

settings = get_settings()

logger = logging.getLogger(__name__)


async def resolve_handshake(frame: AuthFrame) -> int:
    """Turn an ``auth`` frame into a user id.

    By default the frame must carry the same session token used for HTTP
    requests. With ``ws_trust_client_user_id`` enabled a bare ``userId`` is
    accepted without proof, matching legacy clients.
    """

    if frame.token:
        payload = decode_access_token(frame.token)
        user_id = token_subject(payload)
        if frame.user_id is not None and frame.user_id != user_id:
            raise Unauthorized("userId does not match the session token")
    elif settings.ws_trust_client_user_id and frame.user_id is not None:
        user_id = frame.user_id
    else:
        raise Unauthorized("Handshake requires a session token")

    with get_db_session() as db:
        if db.get(User, user_id) is None:
            raise NotFound("User not found")
    return user_id


@router.websocket("/chat")
async def websocket_chat(websocket: WebSocket) -> None:
    """Chat channel: authenticate with an ``auth`` frame, then send ``message`` frames."""

    relay: MessageRelay = websocket.app.state.relay

    await websocket.accept()
    session = ChatSession(
        websocket,
        relay,
        resolve_handshake,
        max_content_length=settings.chat_message_max_length,
    )
    try:
        async for raw_message in iter_keepalive_messages(
            websocket,
            lambda: receive_text_frame(websocket),
            timeout_seconds=settings.websocket_keepalive_timeout_seconds,
            ping_interval_seconds=settings.websocket_keepalive_ping_interval_seconds,
        ):
            await session.handle_text(raw_message)
    finally:
        await session.close()
