"""Main FastAPI application for the multichat service."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from multichat import __version__
from multichat.api import api_router, health_router
from multichat.core.config import get_settings, validate_startup
from multichat.observability import (
    CorrelationIDMiddleware,
    RequestLoggingMiddleware,
    configure_logging,
    get_logger,
    register_exception_handlers,
)
from multichat.observability.constants import LogEvents
from multichat.providers.factory import ProviderFactory

# Get settings for logging configuration
_settings = get_settings()

# Configure structured logging
configure_logging(
    log_level=_settings.log_level,
    log_format=_settings.log_format if not _settings.debug else "console",
    development_mode=_settings.debug,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager.

    Refuses to start when sign-in is enabled without its OAuth secrets.
    """
    settings = get_settings()
    validate_startup(settings)

    logger.info(
        LogEvents.SERVICE_STARTING,
        service_name=settings.service_name,
        debug=settings.debug,
        auth_enabled=settings.auth_enabled,
        providers=ProviderFactory(settings).readiness(),
    )

    yield

    logger.info(LogEvents.SERVICE_STOPPING, service_name=settings.service_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="multichat",
        description="""
Fan one prompt out to several AI chat services.

## Services

- **ChatGPT**: OpenAI chat completions
- **DeepSeek**: DeepSeek chat completions
- **GitHub Copilot**: GitHub code search with coding advice
- **Microsoft Copilot**: Azure OpenAI, then Microsoft Graph

Every service falls back to a local simulated answer when its credentials
are missing or its upstream is unavailable.

## Modes

- `POST /api/chat`: wait for all services, return one combined result list
- `POST /api/chat/stream`: interleave all services' fragments as they arrive
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware executes in reverse order of addition, so add RequestLogging first
    app.add_middleware(
        RequestLoggingMiddleware,
        exclude_paths={"/health", "/ready", "/docs", "/openapi.json", "/redoc"},
        log_request_headers=settings.log_request_headers,
    )
    app.add_middleware(CorrelationIDMiddleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router)  # /health, /ready
    app.include_router(api_router)  # /api/chat, /api/chat/stream

    return app


# Create the app instance
app = create_app()


def main() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "multichat.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
