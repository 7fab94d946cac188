"""
Pytest configuration for the tool gateway test suite.

Reference Documents:
- GUIDELINES pp. 155-157: "high and low gear" testing philosophy
- GUIDELINES pp. 157: FakeRepository pattern using duck typing

This configuration sets up:
- Test discovery paths
- Test markers for categorization
- Singleton resets between tests
- Shared fixtures: execution contexts, a tool factory, in-memory providers
"""

import sys
from pathlib import Path
from typing import Any, Callable, Iterable
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel, ConfigDict

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tool_gateway.core.config import get_settings  # noqa: E402
from tool_gateway.models.domain import (  # noqa: E402
    ALL_ROLES,
    ExecutionContext,
    ToolDefinition,
    ToolMutability,
    ToolsMode,
    UserRole,
)
from tool_gateway.tools.catalog import (  # noqa: E402
    ToolCatalog,
    ToolProvider,
    reset_tool_catalog,
)
from tool_gateway.tools.executor import (  # noqa: E402
    StaticModeProvider,
    ToolExecutor,
    reset_tool_executor,
)
from tool_gateway.tools.registry import reset_tool_registry  # noqa: E402


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """
    Register custom markers for test categorization.

    - unit: Low gear tests for individual components
    - integration: High gear tests across catalog, registry and executor
    """
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across components")


# =============================================================================
# Singleton Reset
# =============================================================================


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch):
    """Give every test fresh settings, catalog, executor and registry."""
    monkeypatch.delenv("AI_TOOLS_MODE", raising=False)
    monkeypatch.delenv("TOOL_GATEWAY_TOOLS_MODE", raising=False)
    monkeypatch.delenv("TOOL_GATEWAY_TOOL_PROVIDERS", raising=False)
    get_settings.cache_clear()
    reset_tool_catalog()
    reset_tool_executor()
    reset_tool_registry()
    yield
    get_settings.cache_clear()
    reset_tool_catalog()
    reset_tool_executor()
    reset_tool_registry()


# =============================================================================
# Execution Contexts
# =============================================================================


@pytest.fixture
def admin_context() -> ExecutionContext:
    return ExecutionContext(user_id="user-1", company_id="company-1", role=UserRole.ADMIN)


@pytest.fixture
def tenant_context() -> ExecutionContext:
    return ExecutionContext(user_id="user-2", company_id="company-1", role=UserRole.TENANT)


# =============================================================================
# Tool Factories (FakeRepository pattern)
# =============================================================================


class EmptyArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")


class StaticToolProvider(ToolProvider):
    """Provider returning a fixed list of definitions."""

    def __init__(self, definitions: Iterable[ToolDefinition]) -> None:
        self._definitions = list(definitions)

    def contribute_tools(self) -> list[ToolDefinition]:
        return list(self._definitions)


@pytest.fixture
def make_tool() -> Callable[..., ToolDefinition]:
    """
    Factory for ToolDefinitions with sensible defaults.

    The default execute is an AsyncMock returning {"ok": True}.
    """

    def _make(
        name: str = "test_tool",
        description: str = "A test tool",
        mutability: ToolMutability = ToolMutability.READONLY,
        allowed_roles: Iterable[UserRole] = ALL_ROLES,
        parameters: Any = EmptyArgs,
        execute: Any = None,
    ) -> ToolDefinition:
        return ToolDefinition(
            name=name,
            description=description,
            mutability=mutability,
            allowed_roles=frozenset(allowed_roles),
            parameters=parameters,
            execute=execute or AsyncMock(return_value={"ok": True}),
        )

    return _make


@pytest.fixture
def make_catalog() -> Callable[..., ToolCatalog]:
    """Factory for a ToolCatalog over in-memory definitions."""

    def _make(*definitions: ToolDefinition) -> ToolCatalog:
        return ToolCatalog([StaticToolProvider(definitions)])

    return _make


@pytest.fixture
def make_executor() -> Callable[..., ToolExecutor]:
    """Factory for a ToolExecutor with a fixed mode."""

    def _make(catalog: ToolCatalog, mode: ToolsMode = ToolsMode.FULL, **kwargs: Any) -> ToolExecutor:
        return ToolExecutor(catalog=catalog, mode_provider=StaticModeProvider(mode), **kwargs)

    return _make
