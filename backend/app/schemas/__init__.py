"""Pydantic schemas for API payloads."""

from .auth import LoginRequest, RegisterRequest, RegistrationOutcome, Token, VerificationResult
from .messages import MessageCreate, MessageRead, UnreadSummary
from .posts import CommentCreate, CommentRead, LikeToggleResult, PostCreate, PostRead
from .users import (
    AdminStats,
    AdminUserRead,
    BlockUpdate,
    PublicUser,
    UserProfileUpdate,
    UserRead,
)

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "RegistrationOutcome",
    "Token",
    "VerificationResult",
    "MessageCreate",
    "MessageRead",
    "UnreadSummary",
    "PostCreate",
    "PostRead",
    "CommentCreate",
    "CommentRead",
    "LikeToggleResult",
    "PublicUser",
    "UserRead",
    "UserProfileUpdate",
    "AdminUserRead",
    "AdminStats",
    "BlockUpdate",
]
