"""Realtime direct messaging: presence, frame protocol and relay."""

from .presence import PresenceRegistry  # noqa: F401
from .protocol import (  # noqa: F401
    AuthFrame,
    ChannelState,
    FrameError,
    KeepaliveFrame,
    SendFrame,
    build_message_envelope,
    error_frame,
    parse_frame,
)
from .relay import DeliveryReport, MessageRelay, MessageStore, safe_send_json  # noqa: F401
from .session import ChatSession, iter_keepalive_messages, receive_text_frame  # noqa: F401

__all__ = [
    "PresenceRegistry",
    "MessageRelay",
    "MessageStore",
    "DeliveryReport",
    "ChatSession",
    "ChannelState",
    "AuthFrame",
    "SendFrame",
    "KeepaliveFrame",
    "FrameError",
    "parse_frame",
    "build_message_envelope",
    "error_frame",
    "safe_send_json",
    "iter_keepalive_messages",
    "receive_text_frame",
]
