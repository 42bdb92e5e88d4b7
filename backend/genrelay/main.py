"""
genrelay application.

FastAPI application exposing text, image, and speech generation with
ordered provider fallback, structured logging, and error handling.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from genrelay import __version__
from genrelay.api import health_router, image_router, speech_router, text_router
from genrelay.config import get_settings
from genrelay.config.validation import log_validation_warnings
from genrelay.core import get_logger, setup_logging
from genrelay.core.middleware import (
    RequestContextMiddleware,
    RequestSizeLimitMiddleware,
    setup_exception_handlers,
)
from genrelay.providers.registry import ProviderRegistry
from genrelay.services import GenerationService

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Startup
    setup_logging(
        level=settings.log_level,
        json_output=settings.log_json and not settings.debug,
        log_file=settings.log_file or None,
    )
    logger.info(
        "Starting genrelay",
        data={
            "host": settings.host,
            "port": settings.port,
            "debug": settings.debug,
            "cors_origins": settings.cors_origins_list,
        },
    )
    log_validation_warnings(settings, verbose=settings.debug)

    _app.state.start_time = datetime.now(UTC)

    # Initialize provider registry unless provided (useful in tests)
    registry_created = False
    if not hasattr(_app.state, "provider_registry"):
        _app.state.provider_registry = ProviderRegistry(settings)
        registry_created = True
    if not hasattr(_app.state, "generation_service"):
        _app.state.generation_service = GenerationService(_app.state.provider_registry)

    yield

    # Shutdown
    logger.info("Shutting down genrelay")
    if registry_created:
        await _app.state.provider_registry.aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="genrelay",
        description="Text, image, and speech generation across AI vendors with ordered fallback",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Setup exception handlers (must be before middleware)
    setup_exception_handlers(app)

    # Add middleware (order matters - last added = first executed)
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_bytes)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Provider"],
    )

    app.include_router(health_router)
    app.include_router(text_router)
    app.include_router(image_router)
    app.include_router(speech_router)

    return app


# Create application instance
app = create_app()
