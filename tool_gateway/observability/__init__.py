"""
Observability Package

This package provides observability infrastructure:
- Structured JSON logging (structlog)
- Prometheus metrics (prometheus_client)
"""

from tool_gateway.observability.logging import (
    clear_correlation_id,
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)
from tool_gateway.observability.metrics import (
    MetricsMiddleware,
    generate_metrics,
    record_manifest_size,
    record_schema_fallback,
    record_tool_call,
)

__all__ = [
    # Logging
    "clear_correlation_id",
    "configure_logging",
    "correlation_id_context",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
    # Metrics
    "MetricsMiddleware",
    "generate_metrics",
    "record_manifest_size",
    "record_schema_fallback",
    "record_tool_call",
]
