"""
Notes Dashboard - FastAPI Application Entry Point.

Feature-based modular architecture:
  Each feature in notesapp/features/ has its own models, repository, service and router.
  Shared infrastructure (database, cache, security, errors) lives in notesapp/core/.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from notesapp.config import Settings, get_settings
from notesapp.core.cache import Cache, build_cache
from notesapp.core.database import create_db_engine, create_session_factory, init_db
from notesapp.core.exceptions import CacheUnavailableError, register_exception_handlers
from notesapp.core.metrics import HttpMetrics, install_metrics
from notesapp.core.security import TokenIssuer

# ── Feature Routers ──────────────────────────────────────
from notesapp.features.auth.router import router as auth_router
from notesapp.features.notes.router import router as notes_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup & shutdown."""
    settings: Settings = app.state.settings
    init_db(app.state.engine)
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} starting")
    logger.info(f"Database: {app.state.engine.url.render_as_string(hide_password=True)}")
    yield
    app.state.engine.dispose()
    logger.info("Shutting down")


def create_app(settings: Settings | None = None, cache: Cache | None = None) -> FastAPI:
    """Application factory.

    Every component is built here and handed to the request dependencies
    through ``app.state``; pass ``cache`` to override the configured backend.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Personal notes with tags",
        lifespan=lifespan,
    )

    engine = create_db_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.cache = cache if cache is not None else build_cache(settings)
    app.state.token_issuer = TokenIssuer.from_settings(settings)
    app.state.metrics = HttpMetrics()

    # ── CORS ─────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    install_metrics(app, app.state.metrics)

    # ── Register Feature Routers ─────────────────────────
    app.include_router(auth_router, prefix=f"{settings.API_PREFIX}/auth", tags=["Auth"])
    app.include_router(notes_router, prefix=f"{settings.API_PREFIX}/notes", tags=["Notes"])

    # ── Health Check ─────────────────────────────────────
    @app.get("/health", tags=["System"])
    async def health_check(request: Request):
        try:
            cache_ok = request.app.state.cache.ping()
        except CacheUnavailableError as e:
            logger.warning(f"Health check: cache unreachable: {e.detail}")
            cache_ok = False
        return {
            "status": "healthy" if cache_ok else "degraded",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "cache": "up" if cache_ok else "down",
        }

    return app


app = create_app()
