from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Account role stored on the user and embedded in session tokens."""

    ADMIN = "admin"
    USER = "user"
