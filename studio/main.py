"""Avatar Studio - FastAPI Application Entry Point.

Session orchestration for avatar-hosted live broadcasts.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studio import __version__
from studio.api.errors import studio_error_handler
from studio.api.routes import health, streams
from studio.collaborators.registry import CollaboratorRegistry, build_registry
from studio.config.settings import Settings, get_settings
from studio.exceptions import StudioError
from studio.observability.logging import get_logger, init_logging, stdlib_level_name
from studio.orchestrator.session import SessionManager

logger = get_logger(__name__)


def create_session_manager(
    settings: Settings,
    registry: CollaboratorRegistry | None = None,
) -> SessionManager:
    """Build the process-wide session manager from settings."""
    return SessionManager(
        registry=registry or build_registry(settings),
        max_sessions=settings.max_concurrent_sessions,
        telemetry_interval_s=settings.telemetry_interval_s,
        release_timeout_s=settings.release_timeout_s,
        retained_terminal_sessions=settings.retained_terminal_sessions,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown of the session manager.
    """
    settings: Settings = app.state.settings
    init_logging(
        json_format=settings.environment == "production",
        level=settings.log_level,
    )
    logger.info(
        "studio_starting",
        version=__version__,
        environment=settings.environment,
        port=settings.api_port,
    )

    try:
        if getattr(app.state, "session_manager", None) is None:
            app.state.session_manager = create_session_manager(settings)
        logger.info(
            "session_manager_initialized",
            max_sessions=settings.max_concurrent_sessions,
        )
        app.state.ready = True
        logger.info("studio_ready")
    except Exception as e:
        logger.error("studio_startup_failed", error=str(e))
        raise

    yield  # Application runs here

    logger.info("studio_shutting_down")
    app.state.ready = False

    ended_count = await app.state.session_manager.end_all_sessions(reason="shutdown")
    logger.info("sessions_ended", count=ended_count)
    logger.info("studio_shutdown_complete")


def create_app(
    settings: Settings | None = None,
    session_manager: SessionManager | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (default: cached environment settings)
        session_manager: Prebuilt manager, e.g. with test collaborators
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Avatar Studio",
        description="Session orchestration for avatar-hosted live broadcasts",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )
    app.state.settings = settings
    app.state.session_manager = session_manager
    app.state.ready = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.environment == "development" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(streams.router)

    app.add_exception_handler(StudioError, studio_error_handler)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    level_name = stdlib_level_name(settings.log_level)

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level_name),
    )

    uvicorn.run(
        "studio.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=level_name.lower(),
        reload=settings.environment == "development",
    )
