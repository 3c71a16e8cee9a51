"""Profile endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.config import get_settings
from app.core.errors import DuplicatePhone, NotFound
from app.database import get_db
from app.models import User, UserRole
from app.schemas import PublicUser, UserProfileUpdate, UserRead

router = APIRouter(prefix="/users", tags=["users"])
settings = get_settings()


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user


@router.put("/me", response_model=UserRead)
def update_me(
    payload: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    """Update profile fields that were provided in the payload."""

    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "name" and value is None:
            continue
        setattr(current_user, field, value)
    db.add(current_user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicatePhone() from exc
    db.refresh(current_user)
    return current_user


@router.get("/search", response_model=list[PublicUser])
def search_users(
    q: str = Query(..., min_length=1, max_length=128),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[User]:
    """Find regular users whose name contains the query."""

    stmt = (
        select(User)
        .where(User.name.ilike(f"%{q}%"), User.role != UserRole.ADMIN)
        .order_by(User.name.asc())
        .limit(settings.user_search_limit)
    )
    return list(db.execute(stmt).scalars())


@router.get("/{user_id}", response_model=PublicUser)
def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user
