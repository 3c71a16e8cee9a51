"""Domain errors raised by services and rendered by the API layer."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class ServiceError(Exception):
    """Base class for failures that map onto a categorical API status."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"
    default_detail: str = "Request failed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_payload(self) -> dict[str, str]:
        return {"detail": self.detail, "code": self.code}


class InvalidCredential(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "invalid_credential"
    default_detail = "Invalid password"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Not found"


class Unverified(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "unverified"
    default_detail = "Please verify your email first"


class Blocked(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "blocked"
    default_detail = "Your account is blocked"


class DuplicateEmail(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_email"
    default_detail = "Email already exists"


class DuplicatePhone(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_phone"
    default_detail = "Phone number already in use"


class InvalidPayload(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_payload"
    default_detail = "Invalid payload"


class ForeignKeyViolation(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "foreign_key_violation"
    default_detail = "Referenced user does not exist"


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_detail = "Could not validate credentials"


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_detail = "Insufficient permissions"


class InvalidToken(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_token"
    default_detail = "Invalid token"


async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error_handler)
