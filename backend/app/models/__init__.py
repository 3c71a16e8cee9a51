"""Database models package."""

from .base import Base
from .enums import UserRole
from .social import Comment, DirectMessage, Like, Post, User

__all__ = [
    "Base",
    "User",
    "Post",
    "Like",
    "Comment",
    "DirectMessage",
    "UserRole",
]
