"""
Health Router

Liveness, readiness and Prometheus metrics endpoints.

Readiness means the tool catalog has been built: every configured provider
imported and contributed its tools without a duplicate name.

Anti-Patterns Avoided:
- ANTI_PATTERN_ANALYSIS §3.1: No bare except clauses - exceptions logged with context
"""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from tool_gateway import __version__
from tool_gateway.observability.metrics import generate_metrics
from tool_gateway.tools.catalog import ToolCatalog, get_tool_catalog

logger = logging.getLogger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    checks: dict[str, bool]
    tools: int = 0


# =============================================================================
# Health Service
# =============================================================================


class HealthService:
    """
    Dependency checks for readiness.

    Pattern: Repository pattern for dependency checks, swappable in tests.
    """

    def check_catalog(self) -> tuple[bool, int]:
        """
        Build (or fetch) the tool catalog.

        Returns:
            (ok, tool_count). ok is False when catalog construction failed.
        """
        try:
            catalog: ToolCatalog = get_tool_catalog()
        except (ImportError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Tool catalog unavailable: {type(e).__name__}: {e}")
            return False, 0
        return True, len(catalog)


_health_service: HealthService | None = None


def get_health_service() -> HealthService:
    """Dependency injection factory for HealthService."""
    global _health_service
    if _health_service is None:
        _health_service = HealthService()
    return _health_service


router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness: the process is up."""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    response: Response,
    health_service: HealthService = Depends(get_health_service),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Returns 503 if the tool catalog cannot be built.
    """
    catalog_ok, tool_count = health_service.check_catalog()
    checks = {"catalog": catalog_ok}

    if not catalog_ok:
        response.status_code = 503

    return ReadinessResponse(
        status="ready" if catalog_ok else "not_ready",
        checks=checks,
        tools=tool_count,
    )


@router.get("/metrics")
async def metrics() -> PlainTextResponse:
    """Prometheus metrics in text exposition format."""
    return PlainTextResponse(
        content=generate_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
