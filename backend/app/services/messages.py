"""Persisted direct message log."""

from __future__ import annotations

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ForeignKeyViolation
from app.database import get_db_session
from app.models import DirectMessage, User
from app.schemas import MessageRead


def _pair_filter(user_a: int, user_b: int):
    return or_(
        and_(DirectMessage.sender_id == user_a, DirectMessage.receiver_id == user_b),
        and_(DirectMessage.sender_id == user_b, DirectMessage.receiver_id == user_a),
    )


def append(
    db: Session,
    sender_id: int,
    receiver_id: int,
    content: str,
    attachment: str | None = None,
) -> MessageRead:
    """Persist a message and return it with its assigned id and timestamp."""

    ids = {sender_id, receiver_id}
    found = set(db.execute(select(User.id).where(User.id.in_(ids))).scalars())
    missing = ids - found
    if missing:
        raise ForeignKeyViolation(f"Unknown user id: {min(missing)}")

    message = DirectMessage(
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        attachment=attachment,
    )
    db.add(message)
    try:
        db.commit()
    except IntegrityError as exc:
        # A participant was deleted between the check and the insert.
        db.rollback()
        raise ForeignKeyViolation() from exc
    db.refresh(message)
    return MessageRead.model_validate(message)


def history(db: Session, user_a: int, user_b: int) -> list[MessageRead]:
    """Return every message between two users, oldest first.

    Symmetric in its arguments. Rows sharing a timestamp keep insertion order.
    """

    stmt = (
        select(DirectMessage)
        .where(_pair_filter(user_a, user_b))
        .order_by(DirectMessage.created_at.asc(), DirectMessage.id.asc())
    )
    return [MessageRead.model_validate(row) for row in db.execute(stmt).scalars()]


def mark_read(db: Session, reader_id: int, sender_id: int) -> int:
    """Flag every unread message from *sender_id* to *reader_id* as read.

    Returns the number of messages that changed.
    """

    stmt = (
        update(DirectMessage)
        .where(
            DirectMessage.sender_id == sender_id,
            DirectMessage.receiver_id == reader_id,
            DirectMessage.is_read.is_(False),
        )
        .values(is_read=True)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount


def unread_count(db: Session, user_id: int) -> int:
    stmt = select(func.count(DirectMessage.id)).where(
        DirectMessage.receiver_id == user_id,
        DirectMessage.is_read.is_(False),
    )
    return db.execute(stmt).scalar_one()


def counterparts(db: Session, user_id: int) -> list[User]:
    """Distinct users the given user has exchanged messages with, most recent first."""

    other_id = func.coalesce(
        func.nullif(DirectMessage.sender_id, user_id), DirectMessage.receiver_id
    ).label("other_id")
    latest = (
        select(other_id, func.max(DirectMessage.id).label("last_id"))
        .where(or_(DirectMessage.sender_id == user_id, DirectMessage.receiver_id == user_id))
        .group_by(other_id)
        .subquery()
    )
    stmt = (
        select(User)
        .join(latest, User.id == latest.c.other_id)
        .where(User.id != user_id)
        .order_by(latest.c.last_id.desc())
    )
    return list(db.execute(stmt).scalars())


class SqlMessageStore:
    """Message store bound to short-lived sessions, used by the chat relay."""

    async def append(
        self,
        sender_id: int,
        receiver_id: int,
        content: str,
        attachment: str | None = None,
    ) -> MessageRead:
        with get_db_session() as db:
            return append(db, sender_id, receiver_id, content, attachment)
