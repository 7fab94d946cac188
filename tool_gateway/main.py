"""
AI Tool Gateway - Main Application Entry Point

This module provides the FastAPI application for the tool gateway.
The gateway exposes curated business operations as tools for an LLM
function-calling loop, gated by the tools mode and the caller's role.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tool_gateway import __version__
from tool_gateway.api.middleware.logging import RequestLoggingMiddleware
from tool_gateway.api.routes.health import router as health_router
from tool_gateway.api.routes.tools import router as tools_router
from tool_gateway.core.config import get_settings
from tool_gateway.observability.logging import configure_logging, get_logger
from tool_gateway.observability.metrics import MetricsMiddleware
from tool_gateway.tools.executor import get_tool_executor

APP_NAME = "AI Tool Gateway"
APP_DESCRIPTION = "LLM function-calling gateway for property-management operations"

logger = get_logger(__name__)


def get_cors_origins() -> list[str]:
    """
    Get CORS allowed origins based on environment.

    - Development: Allow all origins (["*"])
    - Staging/Production: TOOL_GATEWAY_CORS_ORIGINS (JSON list); empty blocks
      all cross-origin requests.
    """
    settings = get_settings()
    if settings.environment == "development":
        return ["*"]
    return list(settings.cors_origins)


# =============================================================================
# Lifespan Context Manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager for startup/shutdown events.

    Startup builds the tool catalog eagerly, so a broken provider
    configuration fails the deploy instead of the first request.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, force=True)

    executor = get_tool_executor()
    app.state.initialized = True
    app.state.environment = settings.environment
    logger.info(
        "service_starting",
        service=settings.service_name,
        version=__version__,
        environment=settings.environment,
        tools=len(executor.catalog),
        mode=executor.get_mode().value,
    )

    yield

    logger.info("service_stopping", service=settings.service_name)
    app.state.initialized = False


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    settings = get_settings()
    is_production = settings.environment == "production"

    application = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=__version__,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(MetricsMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router)
    application.include_router(tools_router)

    @application.get("/", tags=["Info"])
    async def root() -> dict[str, Any]:
        """Root endpoint returning basic service information."""
        return {
            "service": APP_NAME,
            "version": __version__,
            "docs": "disabled" if is_production else "/docs",
        }

    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tool_gateway.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
