"""Direct message history and REST send."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_relay
from app.config import get_settings
from app.core.errors import InvalidPayload, NotFound
from app.database import get_db
from app.models import User
from app.schemas import MessageCreate, MessageRead, PublicUser, UnreadSummary
from app.services import messages as message_store
from meghna.realtime import MessageRelay

router = APIRouter(tags=["messages"])
settings = get_settings()


def _require_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.get("/messages/unread", response_model=UnreadSummary)
def read_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UnreadSummary:
    return UnreadSummary(unread_total=message_store.unread_count(db, current_user.id))


@router.get("/messages/{user_id}", response_model=list[MessageRead])
def read_history(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[MessageRead]:
    """Full conversation between the caller and another user, oldest first."""

    _require_user(db, user_id)
    return message_store.history(db, current_user.id, user_id)


@router.post("/messages/{user_id}/read", response_model=UnreadSummary)
def mark_conversation_read(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UnreadSummary:
    """Mark everything *user_id* sent to the caller as read."""

    _require_user(db, user_id)
    marked = message_store.mark_read(db, current_user.id, user_id)
    return UnreadSummary(
        marked_read=marked,
        unread_total=message_store.unread_count(db, current_user.id),
    )


@router.get("/conversations", response_model=list[PublicUser])
def list_conversations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[User]:
    """Users the caller has exchanged at least one message with."""

    return message_store.counterparts(db, current_user.id)


@router.post("/messages", response_model=MessageRead, status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreate,
    current_user: User = Depends(get_current_user),
    relay: MessageRelay = Depends(get_relay),
) -> MessageRead:
    """Persist a message and push it to any open chat channels of both users."""

    if len(payload.content) > settings.chat_message_max_length:
        raise InvalidPayload(f"Message exceeds {settings.chat_message_max_length} characters")
    report = await relay.deliver(
        current_user.id,
        payload.receiver_id,
        payload.content,
        payload.attachment,
    )
    return report.message
