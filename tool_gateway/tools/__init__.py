"""
Tools Package - catalog, schema translation, manifests and execution

- catalog: process-wide inventory built from tool providers
- schema_translator / llm_schema: validation schema -> LLM schema
- registry: per-request manifests, capacity-limited
- executor: gated, validated, audited tool calls
"""

from tool_gateway.tools.catalog import (
    ToolCatalog,
    ToolProvider,
    get_tool_catalog,
    reset_tool_catalog,
)
from tool_gateway.tools.executor import (
    ModeProvider,
    SettingsModeProvider,
    StaticModeProvider,
    ToolExecutor,
    get_tool_executor,
    reset_tool_executor,
)
from tool_gateway.tools.registry import (
    ManifestEntry,
    OnceLogCache,
    ToolRegistry,
    get_tool_registry,
    reset_tool_registry,
)
from tool_gateway.tools.schema_translator import translate_core_schema, translate_type

__all__ = [
    "ToolCatalog",
    "ToolProvider",
    "get_tool_catalog",
    "reset_tool_catalog",
    "ModeProvider",
    "SettingsModeProvider",
    "StaticModeProvider",
    "ToolExecutor",
    "get_tool_executor",
    "reset_tool_executor",
    "ManifestEntry",
    "OnceLogCache",
    "ToolRegistry",
    "get_tool_registry",
    "reset_tool_registry",
    "translate_core_schema",
    "translate_type",
]
