"""
Tests for structured logging.

Pattern: Structured JSON logging with correlation IDs
"""

import io
import json
import subprocess
import sys
from pathlib import Path

import pytest

from tool_gateway.observability.logging import (
    clear_correlation_id,
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    rename_logger_name,
    reset_logging,
    set_correlation_id,
)

PROJECT_ROOT = Path(__file__).parents[3]


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    configure_logging(level="DEBUG", stream=stream, force=True)
    yield stream
    reset_logging()
    configure_logging(force=True)
    clear_correlation_id()


def _records(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestCorrelationId:
    def test_set_and_clear(self):
        set_correlation_id("req-1")
        assert get_correlation_id() == "req-1"
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_context_manager_restores_previous(self):
        set_correlation_id("outer")
        with correlation_id_context("inner"):
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == "outer"
        clear_correlation_id()


class TestStructuredOutput:
    def test_json_record_fields(self, log_stream):
        logger = get_logger("tool_gateway.tests")

        logger.info("tool_manifest_built", count=3)

        [record] = _records(log_stream)
        assert record["event"] == "tool_manifest_built"
        assert record["count"] == 3
        assert record["level"] == "info"
        assert record["logger"] == "tool_gateway.tests"
        assert "timestamp" in record

    def test_correlation_id_included(self, log_stream):
        logger = get_logger("tool_gateway.tests")

        with correlation_id_context("req-42"):
            logger.warning("tool_execution_rejected")

        [record] = _records(log_stream)
        assert record["correlation_id"] == "req-42"

    def test_level_filtering(self):
        stream = io.StringIO()
        configure_logging(level="WARNING", stream=stream, force=True)
        try:
            logger = get_logger("tool_gateway.tests")
            logger.info("dropped")
            logger.error("kept")
        finally:
            configure_logging(force=True)

        assert [r["event"] for r in _records(stream)] == ["kept"]

    def test_module_logger_follows_reconfiguration(self):
        logger = get_logger("tool_gateway.tests")
        stream = io.StringIO()
        configure_logging(stream=stream, force=True)
        try:
            logger.info("after_reconfigure")
        finally:
            configure_logging(force=True)

        assert _records(stream)[0]["event"] == "after_reconfigure"

    def test_rename_logger_name(self):
        event_dict = {"event": "x", "logger_name": "tool_gateway.audit"}

        assert rename_logger_name(None, "info", event_dict) == {
            "event": "x",
            "logger": "tool_gateway.audit",
        }


class TestModuleLoggers:
    def test_package_imports_with_fresh_structlog(self):
        """Module-level loggers are created at import, before any configure call."""
        code = (
            "import structlog; structlog.reset_defaults(); "
            "import tool_gateway.tools, tool_gateway.main; "
            "from tool_gateway.tools.catalog import get_tool_catalog; "
            "print(len(get_tool_catalog().get_definitions()))"
        )

        completed = subprocess.run(
            [sys.executable, "-c", code],
            capture_output=True,
            text=True,
            timeout=60,
            cwd=PROJECT_ROOT,
        )

        assert completed.returncode == 0, completed.stderr
        assert completed.stdout.strip().splitlines()[-1] == "7"

    def test_module_logger_is_lazy_proxy(self, log_stream):
        from tool_gateway.tools import catalog

        catalog.logger.info("tool_catalog_built", count=0)

        [record] = _records(log_stream)
        assert record["logger"] == "tool_gateway.tools.catalog"
