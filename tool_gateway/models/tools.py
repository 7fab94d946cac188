"""
Tool Models - HTTP request/response models for the tools API.

This module contains Pydantic models for tool listing and execution.

Reference Documents:
- Sinha (FastAPI) pp. 193-195: Pydantic validation patterns

Anti-Patterns Avoided:
- §1.1: Optional fields use Optional[T] with explicit None default
"""

from typing import Any

from pydantic import BaseModel, Field

from tool_gateway.models.domain import ToolMutability, ToolsMode, UserRole


# =============================================================================
# ToolSummary
# =============================================================================


class ToolSummary(BaseModel):
    """
    Public view of a catalog entry.

    Attributes:
        name: Unique tool identifier
        description: Human-readable description
        mutability: readonly or mutable
        enabled: Whether the current mode lets the tool run at all
        allowed_roles: Roles permitted to invoke the tool
    """

    name: str = Field(..., description="Unique tool identifier")
    description: str = Field(..., description="Tool description")
    mutability: ToolMutability = Field(..., description="readonly or mutable")
    enabled: bool = Field(..., description="Runnable under the current mode")
    allowed_roles: list[UserRole] = Field(
        default_factory=list, description="Roles permitted to invoke the tool"
    )


class ToolListResponse(BaseModel):
    """Response for GET /v1/ai/tools."""

    mode: ToolsMode = Field(..., description="Current tools mode")
    tools: list[ToolSummary] = Field(default_factory=list)


# =============================================================================
# ToolExecuteRequest
# =============================================================================


class ToolExecuteRequest(BaseModel):
    """
    Tool execution request model.

    Pattern: Command pattern input (Buelta p. 219)

    Attributes:
        name: Tool name to execute
        arguments: Raw tool arguments, validated against the tool's own schema
    """

    name: str = Field(..., min_length=1, description="Tool name to execute")
    arguments: dict[str, Any] = Field(
        default_factory=dict, description="Tool arguments"
    )


# =============================================================================
# ToolExecuteResponse
# =============================================================================


class ToolExecuteResponse(BaseModel):
    """
    Tool execution response model.

    Attributes:
        name: Tool that was executed
        mode: Mode the call ran under
        result: Sanitized tool result
    """

    name: str = Field(..., description="Tool that was executed")
    mode: ToolsMode = Field(..., description="Mode the call ran under")
    result: Any = Field(default=None, description="Sanitized tool result")
