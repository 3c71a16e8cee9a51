"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.security import access_token_lifetime
from app.database import get_db
from app.schemas import LoginRequest, RegisterRequest, RegistrationOutcome, Token, UserRead, VerificationResult
from app.services import accounts

router = APIRouter()


@router.post("/register", response_model=RegistrationOutcome, status_code=status.HTTP_201_CREATED)
def register_user(payload: RegisterRequest, db: Session = Depends(get_db)) -> RegistrationOutcome:
    """Register a new account.

    Depending on configuration the response either carries a verification
    link or an immediately usable session token.
    """

    result = accounts.register(db, payload)
    user = UserRead.model_validate(result.user)
    if result.access_token is not None:
        return RegistrationOutcome(
            user=user,
            message="Account created",
            access_token=result.access_token,
            token_type="bearer",
        )
    return RegistrationOutcome(
        user=user,
        message="User created. Please verify your email.",
        verification_url=result.verification_url,
    )


@router.get("/verify/{token}", response_model=VerificationResult)
def verify_email(token: str, db: Session = Depends(get_db)) -> VerificationResult:
    """Consume an email verification token."""

    user = accounts.verify_email(db, token)
    return VerificationResult(message="Email verified successfully! You can now login.", user_id=user.id)


@router.post("/login", response_model=Token)
def login_user(credentials: LoginRequest, db: Session = Depends(get_db)) -> Token:
    """Authenticate a user and return a session token."""

    token, user = accounts.authenticate(db, credentials.email, credentials.password)
    lifetime = access_token_lifetime()
    return Token(
        access_token=token,
        token_type="bearer",
        expires_in=int(lifetime.total_seconds()) if lifetime is not None else None,
        user=UserRead.model_validate(user),
    )
