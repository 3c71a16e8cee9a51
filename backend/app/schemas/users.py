"""Schemas related to user profiles and moderation."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, constr

from app.models.enums import UserRole


class PublicUser(BaseModel):
    """Minimal public-facing user information."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    profile_pic: str | None = None
    is_verified: bool = False


class UserRead(PublicUser):
    """Detailed representation of a user profile. Never carries the password hash."""

    email: str
    dob: date | None = None
    phone: str | None = None
    bio: str | None = None
    cover_photo: str | None = None
    role: UserRole = UserRole.USER
    created_at: datetime


class UserProfileUpdate(BaseModel):
    """Payload for updating the current user's profile. Omitted fields are left untouched."""

    model_config = ConfigDict(populate_by_name=True)

    name: constr(strip_whitespace=True, min_length=1, max_length=128) | None = Field(
        default=None, alias="fullName"
    )
    bio: constr(max_length=2000) | None = None
    profile_pic: constr(max_length=512) | None = Field(default=None, alias="profilePic")
    cover_photo: constr(max_length=512) | None = Field(default=None, alias="coverPhoto")
    phone: constr(strip_whitespace=True, min_length=3, max_length=32) | None = None
    dob: date | None = None


class AdminUserRead(BaseModel):
    """User row as listed on the moderation dashboard."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    is_verified: bool
    is_blocked: bool
    created_at: datetime


class BlockUpdate(BaseModel):
    is_blocked: bool = Field(..., alias="isBlocked")

    model_config = ConfigDict(populate_by_name=True)


class AdminStats(BaseModel):
    total_users: int
    total_posts: int
    total_messages: int
