"""FastAPI application factory and lifespan management."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from video_service.api.dependencies import (
    get_settings,
    init_services,
    shutdown_services,
)
from video_service.api.middleware.error_handler import (
    error_handler_middleware,
    validation_exception_handler,
)
from video_service.api.middleware.logging import LoggingMiddleware
from video_service.api.openapi.routes import health, uploads, videos
from video_service.commons.settings.models import Settings
from video_service.commons.telemetry import build_formatter, configure_logging


def _setup_logging() -> None:
    """Configure logging for the application.

    This must be called at module level to ensure our formatters
    are applied before uvicorn starts.
    """
    settings = get_settings()
    log_level = settings.telemetry.log_level or settings.app.log_level

    configure_logging(
        level=log_level,
        format_type=settings.telemetry.log_format,
        logger_name="video_service",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))


def _configure_uvicorn_logging() -> None:
    """Configure uvicorn loggers to use our format.

    Called during lifespan when uvicorn handlers are available.
    """
    settings = get_settings()
    level = getattr(logging, (settings.telemetry.log_level or "INFO").upper())
    formatter = build_formatter(settings.telemetry.log_format)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setFormatter(formatter)
            handler.setLevel(level)
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(formatter)
            handler.setLevel(level)
            logger.addHandler(handler)
            logger.propagate = False


_setup_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown.

    Builds the infrastructure providers on startup and closes their
    connection pools on exit.
    """
    _configure_uvicorn_logging()

    await init_services(get_settings())

    yield

    await shutdown_services()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Video ingestion service - upload, transcode and catalog videos",
        docs_url="/docs" if settings.server.docs_enabled else None,
        redoc_url="/redoc" if settings.server.docs_enabled else None,
        openapi_url="/openapi.json" if settings.server.docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    _configure_middleware(app, settings)

    _register_routes(app, settings)

    return app


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(LoggingMiddleware)

    # Outermost, so it also formats errors escaping the logging middleware
    app.middleware("http")(error_handler_middleware)


def _register_routes(app: FastAPI, settings: Settings) -> None:
    """Register API routes."""
    prefix = settings.server.api_prefix

    # Health routes (no prefix for standard health checks)
    app.include_router(health.router, tags=["Health"])

    # The static upload route is registered before the parameterised ones
    app.include_router(uploads.router, prefix=prefix, tags=["Uploads"])
    app.include_router(videos.router, prefix=prefix, tags=["Videos"])


# Create default app instance
app = create_app()
