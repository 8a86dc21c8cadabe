"""FastAPI application factory.

Learn: App factory pattern: create_app() returns a configured FastAPI
instance. Everything process-wide (settings, DB engine, session factory,
token service) is built once here and hung off app.state; request
dependencies read it from there instead of importing globals.
Lifespan manages startup/shutdown of the database.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from devtasks import __version__
from devtasks.api import api_router
from devtasks.auth.jwt import TokenService
from devtasks.config import Settings, get_settings
from devtasks.db.engine import build_engine, build_session_factory, create_schema
from devtasks.errors import register_error_handlers
from devtasks.logging_config import configure_logging
from devtasks.middleware.request_id import RequestIdMiddleware
from devtasks.middleware.security import SecurityHeadersMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "devtasks.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    if settings.create_schema:
        await create_schema(app.state.engine)
        logger.info("devtasks.schema_ready")

    yield

    logger.info("devtasks.shutdown")
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="DevTasks",
        description="Multi-user project and task tracker",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.token_service = TokenService.from_settings(settings)

    register_error_handlers(app)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app


def run() -> None:
    """Console entry point: devtasks-server."""
    settings = get_settings()
    uvicorn.run(
        "devtasks.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


# Default app instance (used by uvicorn: devtasks.main:app)
app = create_app()
