"""Moderation helpers backing the admin dashboard."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.errors import Forbidden, NotFound
from app.models import DirectMessage, Post, User, UserRole
from app.schemas import AdminStats

logger = logging.getLogger(__name__)


def collect_stats(db: Session) -> AdminStats:
    """Aggregate counts. Administrators are not counted as users."""

    total_users = db.execute(
        select(func.count(User.id)).where(User.role != UserRole.ADMIN)
    ).scalar_one()
    total_posts = db.execute(select(func.count(Post.id))).scalar_one()
    total_messages = db.execute(select(func.count(DirectMessage.id))).scalar_one()
    return AdminStats(
        total_users=total_users,
        total_posts=total_posts,
        total_messages=total_messages,
    )


def list_users(db: Session) -> list[User]:
    stmt = select(User).where(User.role != UserRole.ADMIN).order_by(User.created_at.desc(), User.id.desc())
    return list(db.execute(stmt).scalars())


def _require_target(db: Session, user_id: int, actor: User) -> User:
    target = db.get(User, user_id)
    if target is None:
        raise NotFound("User not found")
    if target.id == actor.id:
        raise Forbidden("Administrators cannot moderate their own account")
    return target


def set_blocked(db: Session, user_id: int, blocked: bool, actor: User) -> User:
    target = _require_target(db, user_id, actor)
    target.is_blocked = blocked
    db.add(target)
    db.commit()
    db.refresh(target)
    logger.info("Admin %s %s user %s", actor.id, "blocked" if blocked else "unblocked", target.id)
    return target


def delete_user(db: Session, user_id: int, actor: User) -> None:
    """Remove a user together with their posts, likes, comments and messages."""

    target = _require_target(db, user_id, actor)
    db.delete(target)
    db.commit()
    logger.info("Admin %s deleted user %s", actor.id, user_id)
