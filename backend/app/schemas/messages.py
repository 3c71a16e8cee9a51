"""Schemas for direct messages, shared by the REST API and the chat socket."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model serialised with camelCase keys, accepting snake_case on input too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageRead(CamelModel):
    """Persisted message as returned by history and relayed over the socket."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    sender_id: int
    receiver_id: int
    content: str
    attachment: str | None = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive timestamps; they are stored in UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class MessageCreate(CamelModel):
    """Payload for sending a message over REST."""

    receiver_id: int = Field(..., description="Recipient user id")
    content: constr(strip_whitespace=True, min_length=1)
    attachment: constr(max_length=512) | None = Field(
        default=None, description="Opaque reference to previously uploaded media"
    )


class UnreadSummary(BaseModel):
    """Unread counters after a read receipt, or on their own."""

    marked_read: int = 0
    unread_total: int
