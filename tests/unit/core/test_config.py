"""
Tests for core configuration.

Pattern: Pydantic Settings with environment variable loading
"""

import pytest
from pydantic import ValidationError

from tool_gateway.core.config import (
    OPENAI_MAX_TOOLS,
    Settings,
    get_settings,
    get_tools_mode_setting,
)


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.service_name == "tool-gateway"
        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.max_manifest_tools == OPENAI_MAX_TOOLS
        assert settings.tool_providers == []

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("TOOL_GATEWAY_MAX_MANIFEST_TOOLS", "64")
        monkeypatch.setenv("TOOL_GATEWAY_ENVIRONMENT", "staging")

        settings = Settings()

        assert settings.max_manifest_tools == 64
        assert settings.environment == "staging"

    def test_log_level_is_normalized(self, monkeypatch):
        monkeypatch.setenv("TOOL_GATEWAY_LOG_LEVEL", "debug")
        assert Settings().log_level == "DEBUG"

    def test_invalid_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("TOOL_GATEWAY_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            Settings()

    @pytest.mark.parametrize("value", ["0", "129"])
    def test_manifest_limit_bounds(self, monkeypatch, value):
        monkeypatch.setenv("TOOL_GATEWAY_MAX_MANIFEST_TOOLS", value)
        with pytest.raises(ValidationError):
            Settings()

    def test_tool_providers_from_json(self, monkeypatch):
        monkeypatch.setenv(
            "TOOL_GATEWAY_TOOL_PROVIDERS",
            '["billing.tools:BillingToolProvider", "leases.tools:LeaseToolProvider"]',
        )
        assert Settings().tool_providers == [
            "billing.tools:BillingToolProvider",
            "leases.tools:LeaseToolProvider",
        ]

    def test_tool_provider_path_needs_attribute(self, monkeypatch):
        monkeypatch.setenv("TOOL_GATEWAY_TOOL_PROVIDERS", '["billing.tools"]')
        with pytest.raises(ValidationError):
            Settings()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestToolsModeSetting:
    def test_unset_is_none(self):
        assert get_tools_mode_setting() is None

    def test_prefixed_variable(self, monkeypatch):
        monkeypatch.setenv("TOOL_GATEWAY_TOOLS_MODE", "READONLY")
        assert get_tools_mode_setting() == "READONLY"

    def test_legacy_variable(self, monkeypatch):
        monkeypatch.setenv("AI_TOOLS_MODE", "full")
        assert get_tools_mode_setting() == "full"

    def test_prefixed_variable_wins(self, monkeypatch):
        monkeypatch.setenv("TOOL_GATEWAY_TOOLS_MODE", "READONLY")
        monkeypatch.setenv("AI_TOOLS_MODE", "FULL")
        assert get_tools_mode_setting() == "READONLY"

    def test_not_cached(self, monkeypatch):
        monkeypatch.setenv("AI_TOOLS_MODE", "NONE")
        assert get_tools_mode_setting() == "NONE"
        monkeypatch.setenv("AI_TOOLS_MODE", "FULL")
        assert get_tools_mode_setting() == "FULL"
