"""Account lifecycle: registration, email verification and session issuance."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.errors import (
    Blocked,
    DuplicateEmail,
    DuplicatePhone,
    InvalidCredential,
    InvalidToken,
    NotFound,
    Unverified,
)
from app.core.security import (
    create_access_token,
    generate_verification_token,
    get_password_hash,
    verify_password,
)
from app.models import User, UserRole
from app.schemas import RegisterRequest

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RegistrationResult:
    user: User
    verification_url: str | None = None
    access_token: str | None = None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(func.lower(User.email) == normalize_email(email))
    return db.execute(stmt).scalar_one_or_none()


def issue_session_token(user: User) -> str:
    """Sign a session token embedding the user id and role."""

    return create_access_token({"sub": str(user.id), "role": user.role.value})


def register(db: Session, payload: RegisterRequest) -> RegistrationResult:
    """Create an account according to the configured verification policy."""

    settings = get_settings()
    email = normalize_email(payload.email)
    if get_user_by_email(db, email) is not None:
        raise DuplicateEmail()

    requires_verification = settings.registration_requires_verification
    user = User(
        name=payload.name,
        email=email,
        hashed_password=get_password_hash(payload.password),
        dob=payload.dob,
        phone=payload.phone,
        role=UserRole.USER,
        is_verified=not requires_verification,
        verification_token=generate_verification_token() if requires_verification else None,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # Lost a race on the unique email, or the phone number is taken.
        if get_user_by_email(db, email) is not None:
            raise DuplicateEmail() from exc
        raise DuplicatePhone() from exc
    db.refresh(user)

    if requires_verification:
        link = settings.verification_url_template.format(token=user.verification_token)
        logger.info("Verification link for %s: %s", user.email, link)
        return RegistrationResult(user=user, verification_url=link)

    return RegistrationResult(user=user, access_token=issue_session_token(user))


def verify_email(db: Session, token: str) -> User:
    """Consume a one-time verification token and mark the account verified."""

    stmt = select(User).where(User.verification_token == token)
    user = db.execute(stmt).scalar_one_or_none()
    if user is None:
        raise InvalidToken()

    user.is_verified = True
    user.verification_token = None
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s verified their email", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> tuple[str, User]:
    """Validate credentials and return a signed session token with the user.

    Checks run in a fixed order so each failure has a distinct kind: unknown
    email, unverified account, blocked account, then the password itself.
    """

    user = get_user_by_email(db, email)
    if user is None:
        raise NotFound("User not found")
    if not user.is_verified:
        raise Unverified()
    if user.is_blocked:
        raise Blocked()
    if not verify_password(password, user.hashed_password):
        raise InvalidCredential()
    return issue_session_token(user), user


def ensure_admin(db: Session, email: str, password: str, name: str) -> User:
    """Create the administrator account if it does not exist yet."""

    existing = get_user_by_email(db, email)
    if existing is not None:
        return existing

    admin = User(
        name=name,
        email=normalize_email(email),
        hashed_password=get_password_hash(password),
        role=UserRole.ADMIN,
        is_verified=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Seeded administrator account %s", admin.email)
    return admin
