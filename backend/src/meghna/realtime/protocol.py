"""JSON frames exchanged over the chat socket."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from app.schemas.messages import MessageRead


class ChannelState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class FrameError(Exception):
    """Raised for frames that cannot be acted upon; reported back as an error frame."""

    def __init__(self, code: str, detail: str) -> None:
        self.code = code
        self.detail = detail
        super().__init__(detail)


class _Frame(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", strict=True
    )


class AuthFrame(_Frame):
    type: Literal["auth"]
    token: str | None = None
    user_id: int | None = None


class SendFrame(_Frame):
    type: Literal["message"]
    receiver_id: int
    content: str = Field(..., min_length=1)
    attachment: str | None = Field(default=None, max_length=512)


class KeepaliveFrame(_Frame):
    type: Literal["ping", "pong"]


Frame = AuthFrame | SendFrame | KeepaliveFrame

_FRAME_TYPES: dict[str, type[_Frame]] = {
    "auth": AuthFrame,
    "message": SendFrame,
    "ping": KeepaliveFrame,
    "pong": KeepaliveFrame,
}


def parse_frame(raw: str, *, max_content_length: int | None = None) -> Frame:
    """Decode a raw text frame into one of the known frame models."""

    if raw.strip().lower() == "ping":
        return KeepaliveFrame(type="ping")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        raise FrameError("invalid_payload", "Invalid message format") from None
    if not isinstance(payload, dict):
        raise FrameError("invalid_payload", "Message payload must be a JSON object")

    frame_type = payload.get("type")
    model = _FRAME_TYPES.get(frame_type) if isinstance(frame_type, str) else None
    if model is None:
        raise FrameError("unknown_type", f"Unsupported frame type: {frame_type!r}")

    try:
        frame = model.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "payload"
        raise FrameError("invalid_payload", f"{location}: {first['msg']}") from None

    if isinstance(frame, SendFrame):
        frame.content = frame.content.strip()
        if not frame.content:
            raise FrameError("invalid_payload", "Message cannot be empty")
        if max_content_length is not None and len(frame.content) > max_content_length:
            raise FrameError(
                "invalid_payload", f"Message exceeds {max_content_length} characters"
            )
    return frame


def build_message_envelope(message: MessageRead) -> dict[str, Any]:
    """Serialise a persisted message the way both participants receive it."""

    return {"type": "message", **message.model_dump(mode="json", by_alias=True)}


def error_frame(code: str, detail: str) -> dict[str, str]:
    return {"type": "error", "code": code, "detail": detail}
