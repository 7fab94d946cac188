"""Models Package - domain models and tools API models."""

from tool_gateway.models.domain import (
    ALL_ROLES,
    ExecutionContext,
    ToolDefinition,
    ToolMutability,
    ToolsMode,
    UserRole,
)
from tool_gateway.models.tools import (
    ToolExecuteRequest,
    ToolExecuteResponse,
    ToolListResponse,
    ToolSummary,
)

__all__ = [
    # Domain
    "ALL_ROLES",
    "ExecutionContext",
    "ToolDefinition",
    "ToolMutability",
    "ToolsMode",
    "UserRole",
    # Tools API
    "ToolExecuteRequest",
    "ToolExecuteResponse",
    "ToolListResponse",
    "ToolSummary",
]
