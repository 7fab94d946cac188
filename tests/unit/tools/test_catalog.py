"""
Test Suite for ToolCatalog and provider loading

Test Categories:
1. TestToolCatalog - ordering, lookup, duplicate names
2. TestProviderLoading - import paths and the default provider list
3. TestCatalogSingleton - global access and reset
"""

from unittest.mock import patch

import pytest

from tool_gateway.tools.builtin.system import SystemToolProvider
from tool_gateway.tools.catalog import (
    ToolCatalog,
    ToolProvider,
    build_default_providers,
    get_tool_catalog,
    load_provider,
    reset_tool_catalog,
)


class StaticToolProvider(ToolProvider):
    def __init__(self, definitions):
        self._definitions = list(definitions)

    def contribute_tools(self):
        return self._definitions


class NotAProvider:
    pass


class FailingProvider(ToolProvider):
    def contribute_tools(self):
        raise RuntimeError("provider exploded")


# =============================================================================
# ToolCatalog
# =============================================================================


class TestToolCatalog:
    def test_definitions_keep_provider_then_contribution_order(self, make_tool):
        first = StaticToolProvider([make_tool(name="b"), make_tool(name="a")])
        second = StaticToolProvider([make_tool(name="c")])

        catalog = ToolCatalog([first, second])

        assert [d.name for d in catalog.get_definitions()] == ["b", "a", "c"]
        assert len(catalog) == 3

    def test_lookup_by_name(self, make_tool, make_catalog):
        tool = make_tool(name="get_units")
        catalog = make_catalog(tool)

        assert catalog.get_definition_by_name("get_units") is tool
        assert "get_units" in catalog

    def test_lookup_missing_returns_none(self, make_catalog):
        catalog = make_catalog()

        assert catalog.get_definition_by_name("nope") is None
        assert "nope" not in catalog

    def test_duplicate_names_rejected(self, make_tool):
        providers = [
            StaticToolProvider([make_tool(name="get_units")]),
            StaticToolProvider([make_tool(name="get_units")]),
        ]

        with pytest.raises(ValueError, match="Duplicate tool name: get_units"):
            ToolCatalog(providers)

    def test_provider_errors_propagate(self):
        with pytest.raises(RuntimeError, match="provider exploded"):
            ToolCatalog([FailingProvider()])

    def test_definitions_are_immutable_sequence(self, make_tool, make_catalog):
        catalog = make_catalog(make_tool())
        assert isinstance(catalog.get_definitions(), tuple)

    def test_build_is_logged(self, make_tool):
        with patch("tool_gateway.tools.catalog.logger") as mock_logger:
            ToolCatalog([StaticToolProvider([make_tool()])])

        mock_logger.info.assert_called_once_with("tool_catalog_built", providers=1, tools=1)


# =============================================================================
# Provider Loading
# =============================================================================


class TestProviderLoading:
    def test_load_provider_by_path(self):
        provider = load_provider("tool_gateway.tools.builtin.system:SystemToolProvider")
        assert isinstance(provider, SystemToolProvider)

    def test_load_missing_module(self):
        with pytest.raises(ImportError):
            load_provider("tool_gateway.no_such_module:Provider")

    def test_load_missing_attribute(self):
        with pytest.raises(AttributeError):
            load_provider("tool_gateway.tools.builtin.system:MissingProvider")

    def test_load_non_provider(self):
        with pytest.raises(TypeError, match="is not a ToolProvider"):
            load_provider(f"{__name__}:NotAProvider")

    def test_default_providers_start_with_system(self):
        providers = build_default_providers([])
        assert len(providers) == 1
        assert isinstance(providers[0], SystemToolProvider)


# =============================================================================
# Singleton
# =============================================================================


class TestCatalogSingleton:
    def test_global_catalog_has_system_tools(self):
        catalog = get_tool_catalog()

        assert "get_health" in catalog
        assert catalog is get_tool_catalog()

    def test_configured_providers_are_appended(self, monkeypatch):
        monkeypatch.setenv(
            "TOOL_GATEWAY_TOOL_PROVIDERS",
            f'["{__name__}:ExtraProvider"]',
        )
        from tool_gateway.core.config import get_settings

        get_settings.cache_clear()
        reset_tool_catalog()

        names = [d.name for d in get_tool_catalog().get_definitions()]

        assert names[-1] == "extra_tool"
        assert names[0] == "get_root"


class ExtraProvider(ToolProvider):
    def contribute_tools(self):
        from tool_gateway.models.domain import ALL_ROLES, ToolDefinition, ToolMutability

        async def run(args, context):
            return {}

        return [
            ToolDefinition(
                name="extra_tool",
                description="Extra",
                mutability=ToolMutability.READONLY,
                allowed_roles=ALL_ROLES,
                parameters=dict,
                execute=run,
            )
        ]
