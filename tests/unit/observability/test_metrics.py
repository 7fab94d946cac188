"""
Tests for Prometheus metrics helpers and middleware.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tool_gateway.observability.metrics import (
    MetricsMiddleware,
    generate_metrics,
    normalize_path,
    record_manifest_size,
    record_schema_fallback,
    record_tool_call,
)


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestNormalizePath:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/", "/"),
            ("/health", "/health"),
            ("/v1/ai/tools/execute", "/v1/ai/tools/execute"),
            ("/v1/properties/12345", "/v1/properties/{id}"),
            ("/v1/units/550e8400-e29b-41d4-a716-446655440000/leases", "/v1/units/{id}/leases"),
        ],
    )
    def test_normalize(self, path, expected):
        assert normalize_path(path) == expected


class TestRecorders:
    def test_record_tool_call_counts_outcome(self):
        labels = {"tool": "metrics_probe", "outcome": "success"}
        before = _sample("tool_gateway_tool_calls_total", labels)

        record_tool_call("metrics_probe", "success", 0.01)

        assert _sample("tool_gateway_tool_calls_total", labels) == before + 1
        assert _sample("tool_gateway_tool_call_duration_seconds_count", {"tool": "metrics_probe"}) >= 1

    def test_record_manifest_size(self):
        before = _sample("tool_gateway_manifest_tools_count")
        record_manifest_size(12)
        assert _sample("tool_gateway_manifest_tools_count") == before + 1

    def test_record_schema_fallback(self):
        labels = {"reason": "root_shape"}
        before = _sample("tool_gateway_schema_fallbacks_total", labels)
        record_schema_fallback("root_shape")
        assert _sample("tool_gateway_schema_fallbacks_total", labels) == before + 1

    def test_generate_metrics_exposes_tool_counters(self):
        record_tool_call("metrics_probe", "forbidden")
        assert "tool_gateway_tool_calls_total" in generate_metrics()


class TestMetricsMiddleware:
    def test_requests_are_counted_with_normalized_path(self):
        app = FastAPI()
        app.add_middleware(MetricsMiddleware)

        @app.get("/items/{item_id}")
        async def item(item_id: int):
            return {"id": item_id}

        labels = {"method": "GET", "path": "/items/{id}", "status": "200"}
        before = _sample("tool_gateway_requests_total", labels)

        with TestClient(app) as client:
            assert client.get("/items/42").status_code == 200

        assert _sample("tool_gateway_requests_total", labels) == before + 1
