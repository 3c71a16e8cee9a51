"""Security helpers for password hashing and token management."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from app.config import get_settings
from app.core.errors import Unauthorized

settings = get_settings()

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hashed counterpart."""

    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password for storing in the database."""

    return pwd_context.hash(password)


def access_token_lifetime() -> timedelta | None:
    minutes = settings.access_token_expire_minutes
    if minutes is None:
        return None
    return timedelta(minutes=max(int(minutes), 1))


def create_access_token(data: Dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT access token.

    The ``exp`` claim is only added when a lifetime is given or configured;
    otherwise the token stays valid until the signing key changes.
    """

    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode["iat"] = now
    lifetime = expires_delta if expires_delta is not None else access_token_lifetime()
    if lifetime is not None:
        to_encode["exp"] = now + lifetime
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT access token."""

    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise Unauthorized("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise Unauthorized() from exc
    return payload


def token_subject(payload: Dict[str, Any]) -> int:
    """Extract the numeric user id carried in ``sub``."""

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise Unauthorized() from None


def generate_verification_token() -> str:
    """Return an unguessable one-time token for email verification links."""

    return secrets.token_urlsafe(24)
