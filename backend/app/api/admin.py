"""Administrator-only moderation endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.database import get_db
from app.models import User
from app.schemas import AdminStats, AdminUserRead, BlockUpdate
from app.services import admin as admin_service

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStats)
def read_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AdminStats:
    return admin_service.collect_stats(db)


@router.get("/users", response_model=list[AdminUserRead])
def list_users(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> list[User]:
    return admin_service.list_users(db)


@router.put("/users/{user_id}/block", response_model=AdminUserRead)
def block_user(
    user_id: int,
    payload: BlockUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> User:
    return admin_service.set_blocked(db, user_id, payload.is_blocked, admin)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> None:
    admin_service.delete_user(db, user_id, admin)
