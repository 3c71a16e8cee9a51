"""FastAPI dependencies for the API layer."""

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.core.errors import Forbidden, Unauthorized
from app.core.security import decode_access_token, token_subject
from app.database import get_db
from app.models import User
from meghna.realtime import MessageRelay

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Retrieve the current user from the bearer token."""

    if not token:
        raise Unauthorized("Missing bearer token")
    return get_user_from_token(token, db)


def get_user_from_token(token: str, db: Session) -> User:
    """Resolve a user from a session token or raise Unauthorized."""

    payload = decode_access_token(token)
    user = db.get(User, token_subject(payload))
    if user is None:
        raise Unauthorized()
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Allow only administrators through."""

    if not current_user.is_admin:
        raise Forbidden("Administrator access required")
    return current_user


def get_relay(request: Request) -> MessageRelay:
    """Return the relay owned by the running application."""

    return request.app.state.relay
