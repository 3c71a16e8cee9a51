"""Schemas for authentication endpoints."""

from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr

from app.schemas.users import UserRead


class RegisterRequest(BaseModel):
    """Payload for creating a new account."""

    model_config = ConfigDict(populate_by_name=True)

    name: constr(strip_whitespace=True, min_length=1, max_length=128) = Field(
        ..., alias="fullName", description="Display name shown to other users"
    )
    email: EmailStr = Field(..., description="Unique email address used to log in")
    password: constr(min_length=6, max_length=128) = Field(
        ..., description="Plain text password that will be hashed before storing"
    )
    dob: date | None = Field(default=None, description="Date of birth")
    phone: constr(strip_whitespace=True, min_length=3, max_length=32) | None = Field(
        default=None, description="Optional phone number"
    )


class LoginRequest(BaseModel):
    """Payload for user login."""

    email: EmailStr = Field(..., description="Account email")
    password: constr(min_length=1, max_length=128) = Field(..., description="Account password")


class Token(BaseModel):
    """Session token returned after successful authentication."""

    access_token: str = Field(..., description="Signed JWT carrying the user id and role")
    token_type: str = Field(default="bearer", description="Token type, always 'bearer'")
    expires_in: int | None = Field(
        default=None,
        description="Seconds until the token expires; null when tokens do not expire",
    )
    user: UserRead


class RegistrationOutcome(BaseModel):
    """Result of a registration, shaped by the configured verification policy."""

    user: UserRead
    message: str
    verification_url: str | None = Field(
        default=None,
        description="Out-of-band verification link when email verification is required",
    )
    access_token: str | None = Field(
        default=None,
        description="Session token issued immediately when verification is disabled",
    )
    token_type: str | None = None


class VerificationResult(BaseModel):
    message: str
    user_id: int
