"""
Tool Catalog - the process-wide inventory of tool definitions

The catalog is built once per process by asking each tool provider (one per
business domain) to contribute its tools. After construction it is an
immutable, ordered list with a name index; it has no request-time logic.

Pattern: Service Registry (tool inventory)
Pattern: Singleton for global catalog access

Providers are either passed in directly or named in configuration as
'package.module:ClassName' import paths. The built-in SystemToolProvider is
always first.
"""

import importlib
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from tool_gateway.core.config import get_settings
from tool_gateway.models.domain import ToolDefinition
from tool_gateway.observability.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# ToolProvider Interface
# =============================================================================


class ToolProvider(ABC):
    """
    A business-domain collaborator contributing tools to the catalog.

    Pattern: ABC for interface contracts

    Example:
        >>> class PropertiesToolProvider(ToolProvider):
        ...     def contribute_tools(self):
        ...         return [GET_PROPERTIES_TOOL, CREATE_PROPERTY_TOOL]
    """

    @abstractmethod
    def contribute_tools(self) -> Iterable[ToolDefinition]:
        """Return this provider's tool definitions, in catalog order."""


# =============================================================================
# ToolCatalog Class
# =============================================================================


class ToolCatalog:
    """
    Immutable, ordered inventory of tool definitions.

    Attributes:
        _definitions: Definitions in provider order, then contribution order.
        _by_name: Name index over _definitions.

    Raises:
        ValueError: If two providers contribute the same tool name.

    Example:
        >>> catalog = ToolCatalog([SystemToolProvider()])
        >>> catalog.get_definition_by_name("get_health").mutability
        <ToolMutability.READONLY: 'readonly'>
    """

    def __init__(self, providers: Sequence[ToolProvider]) -> None:
        definitions: list[ToolDefinition] = []
        by_name: dict[str, ToolDefinition] = {}

        # Provider exceptions propagate unchanged.
        for provider in providers:
            for definition in provider.contribute_tools():
                if definition.name in by_name:
                    raise ValueError(f"Duplicate tool name: {definition.name}")
                by_name[definition.name] = definition
                definitions.append(definition)

        self._definitions: tuple[ToolDefinition, ...] = tuple(definitions)
        self._by_name = by_name

        logger.info(
            "tool_catalog_built",
            providers=len(providers),
            tools=len(self._definitions),
        )

    def get_definitions(self) -> tuple[ToolDefinition, ...]:
        """All definitions in catalog order."""
        return self._definitions

    def get_definition_by_name(self, name: str) -> Optional[ToolDefinition]:
        """Look up a definition by exact name; None if absent."""
        return self._by_name.get(name)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


# =============================================================================
# Provider Loading
# =============================================================================


def load_provider(path: str) -> ToolProvider:
    """
    Import and instantiate a provider from 'package.module:ClassName'.

    Raises:
        ImportError: If the module cannot be imported.
        AttributeError: If the module has no such attribute.
        TypeError: If the attribute does not produce a ToolProvider.
    """
    module_name, _, attribute = path.partition(":")
    module = importlib.import_module(module_name)
    provider = getattr(module, attribute)()
    if not isinstance(provider, ToolProvider):
        raise TypeError(f"{path} is not a ToolProvider")
    return provider


def build_default_providers(paths: Sequence[str]) -> list[ToolProvider]:
    """The built-in system provider followed by configured providers."""
    from tool_gateway.tools.builtin.system import SystemToolProvider

    return [SystemToolProvider(), *(load_provider(path) for path in paths)]


# =============================================================================
# Singleton Access
# =============================================================================

_catalog: Optional[ToolCatalog] = None


def get_tool_catalog() -> ToolCatalog:
    """
    Get the global tool catalog, building it on first use.

    Returns:
        The global ToolCatalog instance.
    """
    global _catalog
    if _catalog is None:
        _catalog = ToolCatalog(build_default_providers(get_settings().tool_providers))
    return _catalog


def reset_tool_catalog() -> None:
    """
    Reset the global tool catalog.

    Primarily used for testing to ensure a clean state.
    """
    global _catalog
    _catalog = None
