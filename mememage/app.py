from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from mememage.core import envelope
from mememage.core.config import Settings, get_settings
from mememage.core.errors import AppError
from mememage.core.logging_config import setup_logging
from mememage.core.tokens import TokenService, resolve_signing_secret
from mememage.db import build_engine, build_sessionmaker
from mememage.db.create_tables import create_all
from mememage.repositories.sql_repository import SQLRepository
from mememage.routers import auth as auth_router
from mememage.routers import health as health_router
from mememage.routers import memes as memes_router
from mememage.services.auth_service import AuthService
from mememage.services.compositor import Compositor, PillowCompositor, ensure_default_template
from mememage.services.meme_service import MemeService

logger = logging.getLogger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration for every request."""

    async def dispatch(self, request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(_request: Request, exc: AppError):
        return envelope.error(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_request: Request, exc: RequestValidationError):
        parts = []
        for err in exc.errors():
            field = ".".join(str(loc) for loc in err.get("loc", ())) or "request"
            parts.append(f"{field}: {err.get('msg')}")
        return envelope.error("Validation error: " + "; ".join(parts), 400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_request: Request, exc: StarletteHTTPException):
        return envelope.error(str(exc.detail), exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return envelope.error("Internal server error", 500)


def create_app(
    settings: Settings | None = None,
    *,
    repository: SQLRepository | None = None,
    compositor: Compositor | None = None,
    token_service: TokenService | None = None,
) -> FastAPI:
    """Build the application with every collaborator injectable."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    engine = None
    if repository is None:
        engine = build_engine(settings.database_url, settings.db_pool_size)
        repository = SQLRepository(build_sessionmaker(engine))
    token_service = token_service or TokenService(resolve_signing_secret(settings))
    compositor = compositor or PillowCompositor()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if engine is not None:
            # A database we cannot reach aborts startup.
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            create_all(engine)
            logger.info("Database ready")
        ensure_default_template(settings.templates_dir)
        yield
        if engine is not None:
            engine.dispose()

    app = FastAPI(title="MemEmage API", lifespan=lifespan)
    app.state.settings = settings
    app.state.token_service = token_service
    app.state.auth_service = AuthService(repository=repository, tokens=token_service)
    app.state.meme_service = MemeService(
        repository=repository,
        compositor=compositor,
        uploads_dir=settings.uploads_dir,
    )

    allow_any = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_any else sorted(settings.cors_origins),
        allow_credentials=not allow_any,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )
    app.add_middleware(AccessLogMiddleware)
    _register_error_handlers(app)

    app.include_router(health_router.router, prefix="/api")
    app.include_router(auth_router.router, prefix="/api")
    app.include_router(memes_router.router, prefix="/api")

    os.makedirs(settings.memes_dir, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.uploads_dir), name="uploads")
    if os.path.isdir(settings.frontend_dir):
        app.mount("/", StaticFiles(directory=settings.frontend_dir, html=True), name="frontend")

    return app
