"""
Tool Manifest Registry - per-request tool manifests for LLM function calling

For each authenticated request the registry turns the catalog into a
manifest: one entry per offered tool, carrying the LLM-facing schema and a
bound invoke() that routes back through the executor.

Schema policy per tool:
- Translate the tool's parameter type (schema_translator).
- If translation raises, use the passthrough object and log an error once
  per tool name.
- The root must be an object. Nullable wrappers and a root reference are
  unwrapped to find one. A parameter type of Any yields the passthrough
  object silently; any other non-object root yields the passthrough object
  and a warning, once per tool name.

Capacity policy: when the catalog exceeds the configured limit (at most
128), tools are ranked against the prompt hint (see relevance.py) and
truncated to exactly the limit.

Pattern: Builder (fresh manifest per request)
Pattern: Singleton for global registry access

The only state kept across requests is the two "already logged" caches,
which are owned by the registry instance and injectable for tests.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from tool_gateway.core.config import OPENAI_MAX_TOOLS, get_settings
from tool_gateway.models.domain import ExecutionContext, ToolDefinition
from tool_gateway.observability.logging import get_logger
from tool_gateway.observability.metrics import (
    record_manifest_size,
    record_schema_fallback,
)
from tool_gateway.tools.catalog import ToolCatalog
from tool_gateway.tools.executor import ToolExecutor, get_tool_executor
from tool_gateway.tools.llm_schema import (
    LlmNullable,
    LlmObject,
    LlmRecord,
    passthrough_object_schema,
)
from tool_gateway.tools.relevance import prioritize
from tool_gateway.tools.schema_translator import translate_core_schema

logger = get_logger(__name__)


# =============================================================================
# Once-per-key Log Cache
# =============================================================================


class OnceLogCache:
    """
    Remembers which keys have already been logged.

    Approximately-once: concurrent first calls for the same key may both
    log. No lock is taken.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def first_time(self, key: str) -> bool:
        """Return True the first time key is seen, False afterwards."""
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def __contains__(self, key: object) -> bool:
        return key in self._seen


# =============================================================================
# ManifestEntry
# =============================================================================


@dataclass(frozen=True)
class ManifestEntry:
    """
    One bindable tool offered to the LLM for a single request.

    Attributes:
        definition: The catalog entry.
        context: Caller identity captured when the manifest was built.
        executor: Executor every invocation is routed through.
        parameters: LLM-facing JSON Schema for the arguments.
    """

    definition: ToolDefinition
    context: ExecutionContext
    executor: ToolExecutor
    parameters: dict[str, Any]

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def description(self) -> str:
        return self.definition.description

    async def invoke(self, raw_args: Union[str, dict, None]) -> Any:
        """
        Run the tool with arguments chosen by the LLM.

        Args:
            raw_args: Arguments as a mapping or the provider's JSON string.

        Returns:
            The sanitized tool result.
        """
        return await self.executor.execute(self.definition.name, raw_args, self.context)

    def to_openai_tool(self) -> dict[str, Any]:
        """OpenAI chat-completions "tools" entry."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def to_anthropic_tool(self) -> dict[str, Any]:
        """Anthropic messages API "tools" entry."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }


# =============================================================================
# ToolRegistry Class
# =============================================================================


class ToolRegistry:
    """
    Builds request-scoped tool manifests.

    Attributes:
        catalog: Source of tool definitions.
        executor: Executor bound into every manifest entry.
        max_tools: Capacity limit, clamped to 1..128.
        root_fallback_warnings: Tools already warned about non-object roots.
        translation_error_logs: Tools already logged for translation errors.

    Example:
        >>> registry = ToolRegistry(catalog, executor)
        >>> tools = registry.openai_tools(context, prompt_hint="ver propiedades")
    """

    def __init__(
        self,
        catalog: ToolCatalog,
        executor: ToolExecutor,
        max_tools: int = OPENAI_MAX_TOOLS,
        root_fallback_warnings: Optional[OnceLogCache] = None,
        translation_error_logs: Optional[OnceLogCache] = None,
    ) -> None:
        self.catalog = catalog
        self.executor = executor
        self.max_tools = max(1, min(max_tools, OPENAI_MAX_TOOLS))
        self.root_fallback_warnings = root_fallback_warnings or OnceLogCache()
        self.translation_error_logs = translation_error_logs or OnceLogCache()

    # =========================================================================
    # build_manifest()
    # =========================================================================

    def build_manifest(
        self, context: ExecutionContext, prompt_hint: Optional[str] = None
    ) -> list[ManifestEntry]:
        """
        Build the manifest for one request.

        Args:
            context: Caller identity bound into every entry.
            prompt_hint: The user's prompt, used to rank tools when the
                catalog exceeds the capacity limit.

        Returns:
            At most max_tools entries.
        """
        selected = prioritize(
            self.catalog.get_definitions(),
            prompt_hint,
            self.max_tools,
            text_of=lambda d: (d.name, d.description),
        )
        manifest = [
            ManifestEntry(
                definition=definition,
                context=context,
                executor=self.executor,
                parameters=self.schema_for(definition),
            )
            for definition in selected
        ]
        record_manifest_size(len(manifest))
        return manifest

    def openai_tools(
        self, context: ExecutionContext, prompt_hint: Optional[str] = None
    ) -> list[dict[str, Any]]:
        return [entry.to_openai_tool() for entry in self.build_manifest(context, prompt_hint)]

    def anthropic_tools(
        self, context: ExecutionContext, prompt_hint: Optional[str] = None
    ) -> list[dict[str, Any]]:
        return [
            entry.to_anthropic_tool() for entry in self.build_manifest(context, prompt_hint)
        ]

    # =========================================================================
    # Schema Selection
    # =========================================================================

    def schema_for(self, definition: ToolDefinition) -> dict[str, Any]:
        """
        LLM-facing parameter schema for a tool, always object-rooted.

        Never raises: translation failures degrade to the passthrough object.
        """
        try:
            core_schema = definition.adapter.core_schema
            document = translate_core_schema(core_schema)
        except Exception as e:
            if self.translation_error_logs.first_time(definition.name):
                logger.error(
                    "tool_schema_translation_failed",
                    tool_name=definition.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            record_schema_fallback("translation_error")
            return passthrough_object_schema()

        root = document.resolve(document.root)
        while isinstance(root, LlmNullable):
            root = document.resolve(root.inner)

        if isinstance(root, (LlmObject, LlmRecord)):
            return document.render(root)

        if core_schema.get("type") != "any" and self.root_fallback_warnings.first_time(
            definition.name
        ):
            logger.warning(
                "tool_schema_root_not_object",
                tool_name=definition.name,
                root=type(root).__name__,
            )
        record_schema_fallback("root_shape")
        return passthrough_object_schema()


# =============================================================================
# Singleton Access
# =============================================================================

_registry: Optional[ToolRegistry] = None


def get_tool_registry() -> ToolRegistry:
    """
    Get the global tool registry instance.

    Returns:
        The global ToolRegistry, bound to the global executor and its catalog.
    """
    global _registry
    if _registry is None:
        executor = get_tool_executor()
        _registry = ToolRegistry(
            catalog=executor.catalog,
            executor=executor,
            max_tools=get_settings().max_manifest_tools,
        )
    return _registry


def reset_tool_registry() -> None:
    """
    Reset the global tool registry.

    Primarily used for testing to ensure a clean state.
    """
    global _registry
    _registry = None
