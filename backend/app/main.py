import logging.config

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import router as api_router
from app.api.ws import router as ws_router
from app.config import get_settings
from app.core.errors import register_error_handlers
from app.database import get_db_session
from app.services import accounts
from app.services.messages import SqlMessageStore
from meghna.realtime import MessageRelay, PresenceRegistry


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        }
    },
    "handlers": {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    },
    "root": {
        "handlers": ["default"],
        "level": "INFO",
    },
    "loggers": {
        "meghna.realtime": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        }
    },
}


logging.config.dictConfig(LOGGING_CONFIG)

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin).rstrip("/") for origin in settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_origin_regex=settings.cors_allow_origin_regex,
)

register_error_handlers(app)


@app.get("/health", tags=["system"])
def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok", "environment": settings.environment}


@app.on_event("startup")
async def _startup() -> None:
    app.state.relay = MessageRelay(SqlMessageStore(), PresenceRegistry())
    if settings.admin_email and settings.admin_password:
        with get_db_session() as db:
            accounts.ensure_admin(db, settings.admin_email, settings.admin_password, settings.admin_name)


@app.on_event("shutdown")
async def _shutdown() -> None:
    relay: MessageRelay | None = getattr(app.state, "relay", None)
    if relay is not None:
        online = await relay.registry.online_user_ids()
        logger.info("Shutting down with %d chat channels registered", len(online))
        await relay.registry.clear()


app.include_router(api_router, prefix="/api")
app.include_router(ws_router)
