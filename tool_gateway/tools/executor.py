"""
Tool Executor - the single authoritative call path for tools

Every tool invocation, whether it comes from the HTTP execute endpoint or
from an LLM manifest entry, goes through ToolExecutor.execute():

1. Resolve the mode (re-read from settings on every call).
2. Look the tool up in the catalog.             -> ToolNotFoundError
3. Mode gate: NONE rejects all, READONLY rejects mutable tools.
4. Role gate: the caller's role must be allowed.
5. Context gate: the caller must have a user id.  -> ToolForbiddenError
6. Validate arguments against the tool's original parameter type. On
   failure, retry once without the None-valued keys the errors point at;
   if that fails too, raise the first error.      -> ToolValidationError
7. Invoke the business logic (sync or async).
8. Strip password fields from the result at any depth.
9. Audit start and end.

Errors raised by the business logic are audited and re-raised unchanged.
Nothing is retried and no timeout is applied here.

Pattern: Command Executor (executes tool calls as commands)
Pattern: Async-first with sync handler support
Pattern: Fail-fast validation
"""

import asyncio
import copy
import dataclasses
import inspect
import json
import time
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Sequence, Union

from pydantic import BaseModel, ValidationError

from tool_gateway.core.config import get_tools_mode_setting
from tool_gateway.core.exceptions import (
    ToolForbiddenError,
    ToolNotFoundError,
    ToolValidationError,
)
from tool_gateway.models.domain import ExecutionContext, ToolDefinition, ToolsMode
from tool_gateway.models.tools import ToolSummary
from tool_gateway.observability.logging import get_logger
from tool_gateway.observability.metrics import record_tool_call
from tool_gateway.tools.audit import ToolAuditLogger
from tool_gateway.tools.catalog import ToolCatalog, get_tool_catalog

logger = get_logger(__name__)

SENSITIVE_KEYS = frozenset({"password", "passwordHash", "password_hash"})


# =============================================================================
# Mode Providers
# =============================================================================


class ModeProvider(ABC):
    """Source of the current tools mode."""

    @abstractmethod
    def current_mode(self) -> ToolsMode:
        """Return the mode in force right now."""


class SettingsModeProvider(ModeProvider):
    """Reads the mode from the environment on every call."""

    def current_mode(self) -> ToolsMode:
        return ToolsMode.parse(get_tools_mode_setting())


class StaticModeProvider(ModeProvider):
    """Fixed mode, for tests and embedded use."""

    def __init__(self, mode: ToolsMode) -> None:
        self.mode = mode

    def current_mode(self) -> ToolsMode:
        return self.mode


# =============================================================================
# Argument and Result Helpers
# =============================================================================


def strip_none_at(value: Any, locs: Iterable[Sequence[Union[int, str]]]) -> Any:
    """
    Copy of value with the None-valued keys named by error locations removed.

    Each loc is walked from the root through dict keys and list indexes;
    the first None-valued key met on the way is dropped. Loc parts that
    match nothing (union branch tags and the like) are skipped. None values
    that no loc names are kept, so required nullable fields stay null.

    Example:
        >>> strip_none_at({"a": None, "b": None, "c": [{"d": None}]}, [("b",), ("c", 0, "d")])
        {'a': None, 'c': [{}]}
    """
    stripped = copy.deepcopy(value)
    for loc in locs:
        node = stripped
        for part in loc:
            if isinstance(node, dict) and part in node:
                if node[part] is None:
                    del node[part]
                    break
                node = node[part]
            elif isinstance(node, list) and isinstance(part, int) and 0 <= part < len(node):
                node = node[part]
    return stripped


def sanitize_result(value: Any) -> Any:
    """
    Remove password fields at any depth.

    Pydantic models and dataclasses are dumped to plain data first, so the
    output is always plain dicts, lists and scalars.

    Example:
        >>> sanitize_result([{"id": 1, "passwordHash": "x", "nested": {"password": "y"}}])
        [{'id': 1, 'nested': {}}]
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)

    if isinstance(value, dict):
        return {
            key: sanitize_result(item)
            for key, item in value.items()
            if key not in SENSITIVE_KEYS
        }
    if isinstance(value, (list, tuple)):
        return [sanitize_result(item) for item in value]
    return value


def decode_arguments(tool_name: str, raw_args: Union[str, dict, None]) -> Any:
    """
    Accept arguments as a mapping or as the JSON string LLM providers send.

    Raises:
        ToolValidationError: If a string is not valid JSON.
    """
    if raw_args is None or raw_args == "":
        return {}
    if isinstance(raw_args, str):
        try:
            return json.loads(raw_args)
        except json.JSONDecodeError as e:
            raise ToolValidationError(
                f"Arguments for {tool_name} are not valid JSON: {e.msg}",
                tool_name=tool_name,
                errors=[{"type": "json_invalid", "loc": [], "msg": e.msg}],
            ) from e
    return raw_args


# =============================================================================
# ToolExecutor Class
# =============================================================================


class ToolExecutor:
    """
    Gatekeeper and invoker for catalog tools.

    Pattern: Dependency Injection (catalog, mode provider and audit logger
    are injected)

    Attributes:
        catalog: The ToolCatalog to resolve tools from.
        mode_provider: Source of the current tools mode.
        audit: Audit record emitter.

    Example:
        >>> executor = ToolExecutor(catalog=get_tool_catalog())
        >>> result = await executor.execute("get_health", {}, context)
    """

    def __init__(
        self,
        catalog: ToolCatalog,
        mode_provider: Optional[ModeProvider] = None,
        audit: Optional[ToolAuditLogger] = None,
    ) -> None:
        self.catalog = catalog
        self.mode_provider = mode_provider or SettingsModeProvider()
        self.audit = audit or ToolAuditLogger()

    def get_mode(self) -> ToolsMode:
        return self.mode_provider.current_mode()

    # =========================================================================
    # list_tools()
    # =========================================================================

    def list_tools(self, mode: Optional[ToolsMode] = None) -> list[ToolSummary]:
        """
        Summarize every catalog tool.

        Args:
            mode: Mode to evaluate "enabled" against (default: current mode).

        Returns:
            One ToolSummary per tool, in catalog order. enabled is True in
            FULL mode, or in READONLY mode for readonly tools.
        """
        mode = mode or self.get_mode()
        return [
            ToolSummary(
                name=definition.name,
                description=definition.description,
                mutability=definition.mutability,
                enabled=mode.allows(definition.mutability),
                allowed_roles=sorted(definition.allowed_roles, key=lambda r: r.value),
            )
            for definition in self.catalog.get_definitions()
        ]

    # =========================================================================
    # execute()
    # =========================================================================

    async def execute(
        self,
        name: str,
        raw_args: Union[str, dict, None],
        context: ExecutionContext,
    ) -> Any:
        """
        Execute a tool call on behalf of a caller.

        Args:
            name: Tool name.
            raw_args: Arguments as a mapping or JSON string.
            context: Caller identity.

        Returns:
            The sanitized result of the tool's business logic.

        Raises:
            ToolNotFoundError: Unknown tool name.
            ToolForbiddenError: Mode, role or context gate rejected the call.
            ToolValidationError: Arguments invalid on both passes.
            Exception: Whatever the business logic raised, unchanged.
        """
        mode = self.get_mode()

        definition = self.catalog.get_definition_by_name(name)
        if definition is None:
            record_tool_call("unknown", "not_found")
            raise ToolNotFoundError(name)

        self._authorize(definition, mode, context)
        arguments = self._decode_arguments(definition, raw_args)
        parsed = self._parse_arguments(definition, arguments)

        self.audit.start(name, context, sanitize_result(arguments))
        start = time.perf_counter()
        try:
            result = await self._invoke(definition, parsed, context)
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.audit.error(name, context, elapsed * 1000, e)
            record_tool_call(name, "error", elapsed)
            raise

        elapsed = time.perf_counter() - start
        self.audit.success(name, context, elapsed * 1000)
        record_tool_call(name, "success", elapsed)
        return sanitize_result(result)

    # =========================================================================
    # Gates
    # =========================================================================

    def _authorize(
        self, definition: ToolDefinition, mode: ToolsMode, context: ExecutionContext
    ) -> None:
        """Apply the mode, role and context gates in that order."""
        if not mode.allows(definition.mutability):
            self._reject(definition, context, "mode", mode=mode.value)
        if context.role not in definition.allowed_roles:
            self._reject(definition, context, "role")
        if not context.has_user:
            self._reject(definition, context, "context")

    def _reject(
        self,
        definition: ToolDefinition,
        context: ExecutionContext,
        reason: str,
        **extra: Any,
    ) -> None:
        logger.warning(
            "tool_execution_rejected",
            tool_name=definition.name,
            reason=reason,
            role=context.role.value,
            user_id=context.user_id or None,
            mutability=definition.mutability.value,
            **extra,
        )
        record_tool_call(definition.name, "forbidden")
        raise ToolForbiddenError(definition.name, reason)

    # =========================================================================
    # Argument Validation
    # =========================================================================

    def _decode_arguments(
        self, definition: ToolDefinition, raw_args: Union[str, dict, None]
    ) -> Any:
        try:
            return decode_arguments(definition.name, raw_args)
        except ToolValidationError:
            record_tool_call(definition.name, "invalid")
            raise

    def _parse_arguments(self, definition: ToolDefinition, arguments: Any) -> Any:
        """
        Validate arguments against the tool's original parameter type.

        LLMs following the strict function-calling convention send null for
        every field they mean to omit. The second pass drops the null keys
        the first pass rejected, so that fields with defaults fall back to
        their defaults while required nullable fields keep their null.
        """
        adapter = definition.adapter
        try:
            return adapter.validate_python(arguments)
        except ValidationError as e:
            first_error = e

        retry = strip_none_at(arguments, (error["loc"] for error in first_error.errors()))
        if retry == arguments:
            raise self._invalid(definition, first_error) from first_error
        try:
            return adapter.validate_python(retry)
        except ValidationError:
            raise self._invalid(definition, first_error) from first_error

    def _invalid(
        self, definition: ToolDefinition, error: ValidationError
    ) -> ToolValidationError:
        logger.info(
            "tool_arguments_invalid",
            tool_name=definition.name,
            error_count=error.error_count(),
        )
        record_tool_call(definition.name, "invalid")
        return ToolValidationError(
            f"Invalid arguments for {definition.name}",
            tool_name=definition.name,
            errors=error.errors(include_url=False, include_context=False),
        )

    # =========================================================================
    # Invocation
    # =========================================================================

    async def _invoke(
        self, definition: ToolDefinition, parsed: Any, context: ExecutionContext
    ) -> Any:
        """
        Call the business operation.

        Coroutine functions are awaited directly. Plain callables run in the
        default executor so they cannot block the event loop; an awaitable
        they return is awaited as well.
        """
        handler = definition.execute
        if inspect.iscoroutinefunction(handler):
            return await handler(parsed, context)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, handler, parsed, context)
        if inspect.isawaitable(result):
            result = await result
        return result


# =============================================================================
# Singleton Access
# =============================================================================

_executor: Optional[ToolExecutor] = None


def get_tool_executor() -> ToolExecutor:
    """
    Get the global tool executor instance.

    Uses the global tool catalog and reads the mode from settings.

    Returns:
        The global ToolExecutor instance.
    """
    global _executor
    if _executor is None:
        _executor = ToolExecutor(catalog=get_tool_catalog())
    return _executor


def reset_tool_executor() -> None:
    """
    Reset the global tool executor.

    Primarily used for testing to ensure a clean state.
    """
    global _executor
    _executor = None
