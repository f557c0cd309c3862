from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from vita import __version__
from vita.core.config import DEFAULT_JWT_SECRET, Settings, get_settings
from vita.core.errors import AuthenticationError, ServerError, ValidationError, VitaError
from vita.core.logging_setup import setup_logging
from vita.core.rate_limiter import RateLimiter
from vita.repositories import build_repository
from vita.repositories.base import Repository
from vita.routers import auth as auth_router
from vita.routers import dashboard as dashboard_router
from vita.routers import habits as habits_router
from vita.routers import tasks as tasks_router
from vita.services import AuthService, DashboardService, HabitService, TaskService
from vita.services.session_service import current_identity

logger = logging.getLogger(__name__)

DEV_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)

# routes reachable without a bearer token
PUBLIC_PREFIXES = ("/auth/", "/health")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers for a JSON-only API."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cache-Control", "no-store")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def _validation_fields(exc: RequestValidationError) -> dict[str, list[str]]:
    """Flatten pydantic errors into {field: [messages]}."""
    fields: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [part for part in error.get("loc", ()) if part != "body"]
        name = ".".join(str(part) for part in loc if isinstance(part, str)) or "body"
        message = str(error.get("msg") or "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        fields.setdefault(name, []).append(message)
    return fields


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(VitaError)
    async def _vita_error(request: Request, exc: VitaError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
            exc = ServerError()
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        # guarded routes answer 401 before any body error
        if not request.url.path.startswith(PUBLIC_PREFIXES):
            try:
                current_identity(request)
            except AuthenticationError as err:
                return JSONResponse(err.to_dict(), status_code=err.status_code)
        error = ValidationError(_validation_fields(exc))
        return JSONResponse(error.to_dict(), status_code=error.status_code)

    @app.exception_handler(SQLAlchemyError)
    async def _database_error(request: Request, exc: SQLAlchemyError):
        logger.error("%s %s database failure", request.method, request.url.path, exc_info=exc)
        error = ServerError()
        return JSONResponse(error.to_dict(), status_code=error.status_code)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.error("%s %s unexpected failure", request.method, request.url.path, exc_info=exc)
        error = ServerError()
        return JSONResponse(error.to_dict(), status_code=error.status_code)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("VITA API started (%s backend)", app.state.repository.backend_name)
    try:
        yield
    finally:
        app.state.repository.close()
        logger.info("VITA API stopped")


def create_app(settings: Settings | None = None, repository: Repository | None = None) -> FastAPI:
    """
    Build the API. Compatible with `uvicorn vita.app:create_app --factory`.

    The persistence backend is chosen once here (demo JSON file or SQL) and
    shared by every request; its pool is released at shutdown.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    if settings.app_env == "prod" and settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is not set; tokens are signed with the default development secret")

    repository = repository or build_repository(settings)

    app = FastAPI(title="VITA API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repository
    app.state.rate_limiter = RateLimiter(settings.auth_rate_limit, settings.auth_rate_window_seconds)
    app.state.auth_service = AuthService(repository, settings)
    app.state.task_service = TaskService(repository)
    app.state.habit_service = HabitService(repository)
    app.state.dashboard_service = DashboardService(app.state.task_service, app.state.habit_service)

    allowed_cors = set(settings.cors_origins)
    if settings.app_env != "prod":
        allowed_cors.update(DEV_ORIGINS)
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=False,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    register_exception_handlers(app)

    app.include_router(auth_router.router)
    app.include_router(tasks_router.router)
    app.include_router(habits_router.router)
    app.include_router(dashboard_router.router)

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok", "backend": repository.backend_name}

    logger.info("Using %s backend", repository.backend_name)
    return app
