"""
Prometheus Metrics Module

This module provides Prometheus metrics for the gateway: HTTP request
metrics collected by MetricsMiddleware, and tool-call metrics recorded by
the executor.

Reference Documents:
- Newman (Building Microservices pp. 273-275): Services "expose basic metrics
  themselves" including "response times and error rates"

Pattern: Metrics collection for observability

Path labels are normalized with normalize_path() so dynamic segments do not
explode label cardinality.
"""

import re
import time
from typing import Any, Callable, Optional

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# =============================================================================
# Path Normalization
# =============================================================================

# Order matters: more specific patterns first
_PATH_PATTERNS = [
    # UUID: 8-4-4-4-12 hex
    (re.compile(r"/[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"), "/{id}"),
    # Generic hex ID: 8+ hex chars
    (re.compile(r"/[0-9a-fA-F]{8,}(?=/|$)"), "/{id}"),
    # Numeric ID
    (re.compile(r"/\d+(?=/|$)"), "/{id}"),
]


def normalize_path(path: str) -> str:
    """
    Normalize a URL path by replacing dynamic segments with placeholders.

    Args:
        path: The URL path to normalize

    Returns:
        Normalized path with dynamic segments replaced

    Examples:
        >>> normalize_path("/health")
        '/health'
        >>> normalize_path("/v1/properties/12345")
        '/v1/properties/{id}'
    """
    if path == "/":
        return path

    normalized = path
    for pattern, replacement in _PATH_PATTERNS:
        normalized = pattern.sub(replacement, normalized)
    return normalized


# =============================================================================
# HTTP Metrics
# =============================================================================

REQUESTS_TOTAL = Counter(
    name="tool_gateway_requests_total",
    documentation="Total number of HTTP requests",
    labelnames=["method", "path", "status"],
)

REQUEST_DURATION_SECONDS = Histogram(
    name="tool_gateway_request_duration_seconds",
    documentation="HTTP request duration in seconds",
    labelnames=["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

REQUESTS_IN_PROGRESS = Gauge(
    name="tool_gateway_requests_in_progress",
    documentation="Number of HTTP requests currently being processed",
    labelnames=["method"],
)

# =============================================================================
# Tool Metrics
# =============================================================================

# outcome: success | error | not_found | forbidden | invalid
TOOL_CALLS_TOTAL = Counter(
    name="tool_gateway_tool_calls_total",
    documentation="Tool calls by tool name and outcome",
    labelnames=["tool", "outcome"],
)

TOOL_CALL_DURATION_SECONDS = Histogram(
    name="tool_gateway_tool_call_duration_seconds",
    documentation="Duration of tool business logic in seconds",
    labelnames=["tool"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

MANIFEST_SIZE = Histogram(
    name="tool_gateway_manifest_tools",
    documentation="Number of tools offered per manifest",
    buckets=(1, 8, 16, 32, 64, 96, 128),
)

SCHEMA_FALLBACKS_TOTAL = Counter(
    name="tool_gateway_schema_fallbacks_total",
    documentation="Tool schemas replaced by the passthrough object, by reason",
    labelnames=["reason"],
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_tool_call(tool: str, outcome: str, duration: Optional[float] = None) -> None:
    """
    Record the outcome of a tool call.

    Args:
        tool: Tool name (unknown names are recorded as "unknown")
        outcome: success, error, not_found, forbidden or invalid
        duration: Business logic duration in seconds, when it ran
    """
    TOOL_CALLS_TOTAL.labels(tool=tool, outcome=outcome).inc()
    if duration is not None:
        TOOL_CALL_DURATION_SECONDS.labels(tool=tool).observe(duration)


def record_manifest_size(count: int) -> None:
    """Record how many tools a manifest offered."""
    MANIFEST_SIZE.observe(count)


def record_schema_fallback(reason: str) -> None:
    """
    Record a passthrough substitution.

    Args:
        reason: "root_shape" or "translation_error"
    """
    SCHEMA_FALLBACKS_TOTAL.labels(reason=reason).inc()


# =============================================================================
# MetricsMiddleware ASGI Middleware
# =============================================================================


class MetricsMiddleware:
    """
    ASGI middleware for Prometheus HTTP metrics.

    This middleware:
    - Increments request counter per method/path/status
    - Records request latency histogram
    - Tracks in-progress requests gauge
    - Excludes /metrics path from metrics
    """

    def __init__(
        self,
        app: Callable[..., Any],
        exclude_paths: Optional[list[str]] = None,
    ) -> None:
        self.app = app
        self.exclude_paths = exclude_paths or ["/metrics"]

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Any],
        send: Callable[..., Any],
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "GET")
        raw_path = scope.get("path", "/")

        if raw_path in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        path = normalize_path(raw_path)

        REQUESTS_IN_PROGRESS.labels(method=method).inc()
        start_time = time.perf_counter()
        status_code = "500"

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = str(message.get("status", 500))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration = time.perf_counter() - start_time
            REQUESTS_TOTAL.labels(method=method, path=path, status=status_code).inc()
            REQUEST_DURATION_SECONDS.labels(method=method, path=path).observe(duration)
            REQUESTS_IN_PROGRESS.labels(method=method).dec()


# =============================================================================
# Metrics Endpoint
# =============================================================================


def generate_metrics() -> str:
    """Generate Prometheus metrics text format."""
    return generate_latest(REGISTRY).decode("utf-8")
