from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = Field(default="Meghna Social API", env="APP_NAME", description="Human readable service name")
    environment: str = Field(default="development", env="ENVIRONMENT", description="Deployment environment name")
    debug: bool = Field(default=False, env="DEBUG", description="Enable debug mode")

    cors_origins: Annotated[List[AnyHttpUrl], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1",
            "http://127.0.0.1:3000",
        ],
        env="CORS_ORIGINS",
        description="List of allowed CORS origins",
    )

    cors_allow_origin_regex: str | None = Field(
        default=r"^https?://(localhost|127\.0\.0\.1|0\.0\.0\.0|\[::1\])(:\d+)?$",
        env="CORS_ALLOW_ORIGIN_REGEX",
        description="Optional regular expression that matches allowed CORS origins",
    )

    database_url: str = Field(default="sqlite+pysqlite:///./meghna.db", env="DATABASE_URL")

    jwt_secret_key: str = Field(default="changeme", env="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", env="JWT_ALGORITHM")
    access_token_expire_minutes: int | None = Field(
        default=None,
        env="ACCESS_TOKEN_EXPIRE_MINUTES",
        description="Session token lifetime. Leave unset for tokens without an expiry claim.",
    )

    registration_requires_verification: bool = Field(
        default=True,
        env="REGISTRATION_REQUIRES_VERIFICATION",
        description="Require email verification before a new account may log in.",
    )
    public_base_url: str = Field(
        default="http://localhost:8000",
        env="PUBLIC_BASE_URL",
        description="Externally reachable base URL used to build verification links",
    )

    ws_trust_client_user_id: bool = Field(
        default=False,
        env="WS_TRUST_CLIENT_USER_ID",
        description=(
            "Accept a bare userId in the chat handshake without a session token. "
            "Insecure; kept for clients that predate token handshakes."
        ),
    )
    chat_message_max_length: int = Field(default=2000, env="CHAT_MESSAGE_MAX_LENGTH")
    websocket_keepalive_timeout_seconds: float = Field(
        default=30, env="WEBSOCKET_KEEPALIVE_TIMEOUT_SECONDS"
    )
    websocket_keepalive_ping_interval_seconds: float = Field(
        default=30, env="WEBSOCKET_KEEPALIVE_PING_INTERVAL_SECONDS"
    )

    admin_email: str | None = Field(
        default=None,
        env="ADMIN_EMAIL",
        description="Seed an administrator with this email on startup when set",
    )
    admin_password: str | None = Field(default=None, env="ADMIN_PASSWORD")
    admin_name: str = Field(default="Administrator", env="ADMIN_NAME")

    user_search_limit: int = Field(default=10, env="USER_SEARCH_LIMIT")

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):  # type: ignore[override]
        if v in (None, "", Ellipsis):
            return v
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, (list, tuple, set)):
            return list(v)
        return v

    @field_validator("access_token_expire_minutes", mode="before")
    @classmethod
    def empty_expiry_means_unbounded(cls, value):
        if value in ("", "0", 0):
            return None
        return value

    @property
    def verification_url_template(self) -> str:
        return self.public_base_url.rstrip("/") + "/api/auth/verify/{token}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
