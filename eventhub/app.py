from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from eventhub.core.config import Settings, get_settings
from eventhub.core.rate_limiter import RateLimiter
from eventhub.core.utils import configure_logging
from eventhub.domain.errors import PersistenceError
from eventhub.repositories.event_store import EventStore
from eventhub.repositories.json_storage import JsonCollectionFile
from eventhub.repositories.user_store import UserStore
from eventhub.routers import auth as auth_router
from eventhub.routers import events as events_router
from eventhub.services.auth_service import AuthService
from eventhub.services.registration_service import RegistrationService

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, nosniff, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


async def open_stores(settings: Settings) -> tuple[UserStore, EventStore]:
    """Build both stores and load their files."""
    users = UserStore(JsonCollectionFile(settings.users_path))
    events = EventStore(JsonCollectionFile(settings.events_path))
    await users.load()
    await events.load()
    return users, events


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory compatible with uvicorn --factory."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        users, events = await open_stores(settings)
        app.state.users = users
        app.state.events = events
        app.state.auth_service = AuthService(users=users, settings=settings)
        app.state.registration_service = RegistrationService(events=events, users=users)
        logger.info("eventhub ready (%s): data in %s", settings.app_env, settings.data_dir)
        yield

    app = FastAPI(title="Event Registration API", lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_limiter = RateLimiter()

    allowed_cors = set(settings.cors_origins)
    if settings.app_env != "prod":
        allowed_cors.update({"http://localhost:3000", "http://127.0.0.1:3000"})
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    @app.exception_handler(PersistenceError)
    async def persistence_failed(request: Request, exc: PersistenceError):
        logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc.message)
        detail = exc.message if settings.app_env != "prod" else "Internal server error"
        return JSONResponse(status_code=500, content={"success": False, "message": "Something went wrong!", "error": detail})

    app.include_router(auth_router.router)
    app.include_router(events_router.router)
    return app
