"""
AI Tools Router

HTTP surface of the tool gateway:
- GET  /v1/ai/tools            current mode and tool summaries
- GET  /v1/ai/tools/openai     OpenAI "tools" array for the caller
- GET  /v1/ai/tools/anthropic  Anthropic "tools" array for the caller
- POST /v1/ai/tools/execute    run one tool

Every execution goes through ToolExecutor.execute(), the same path LLM
manifest entries use. Gateway rejections map to HTTP errors; errors raised
by a tool's business logic propagate unchanged.

Anti-Patterns Avoided:
- ANTI_PATTERN_ANALYSIS §3.1: No bare except clauses
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tool_gateway.api.deps import (
    get_execution_context,
    get_tool_executor,
    get_tool_registry,
)
from tool_gateway.core.exceptions import (
    ErrorCode,
    ToolForbiddenError,
    ToolGatewayException,
    ToolNotFoundError,
    ToolValidationError,
)
from tool_gateway.models.domain import ExecutionContext
from tool_gateway.models.tools import (
    ToolExecuteRequest,
    ToolExecuteResponse,
    ToolListResponse,
)
from tool_gateway.tools.executor import ToolExecutor
from tool_gateway.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/ai/tools", tags=["AI Tools"])


def _error_detail(exc: ToolGatewayException) -> dict[str, Any]:
    """Error body shared by all gateway rejections."""
    return {"code": ErrorCode(exc.error_code).value, "message": exc.message}


# =============================================================================
# List Tools Endpoint
# =============================================================================


@router.get("", response_model=ToolListResponse)
async def list_tools(
    executor: ToolExecutor = Depends(get_tool_executor),
) -> ToolListResponse:
    """
    List every catalog tool with whether the current mode enables it.

    Returns:
        ToolListResponse with the mode and one summary per tool
    """
    mode = executor.get_mode()
    return ToolListResponse(mode=mode, tools=executor.list_tools(mode))


# =============================================================================
# Manifest Endpoints
# =============================================================================


@router.get("/openai")
async def openai_tools(
    prompt: Optional[str] = Query(default=None, description="User prompt used to rank tools"),
    context: ExecutionContext = Depends(get_execution_context),
    registry: ToolRegistry = Depends(get_tool_registry),
) -> list[dict[str, Any]]:
    """Tool manifest in OpenAI function-calling format."""
    return registry.openai_tools(context, prompt)


@router.get("/anthropic")
async def anthropic_tools(
    prompt: Optional[str] = Query(default=None, description="User prompt used to rank tools"),
    context: ExecutionContext = Depends(get_execution_context),
    registry: ToolRegistry = Depends(get_tool_registry),
) -> list[dict[str, Any]]:
    """Tool manifest in Anthropic tool-use format."""
    return registry.anthropic_tools(context, prompt)


# =============================================================================
# Tool Execution Endpoint
# =============================================================================


@router.post("/execute", response_model=ToolExecuteResponse)
async def execute_tool(
    request: ToolExecuteRequest,
    context: ExecutionContext = Depends(get_execution_context),
    executor: ToolExecutor = Depends(get_tool_executor),
) -> ToolExecuteResponse:
    """
    Execute a tool with given arguments.

    Raises:
        HTTPException 404: Tool not found in catalog
        HTTPException 403: Mode, role or user gate rejected the call
        HTTPException 422: Invalid tool arguments
    """
    logger.debug(f"Tool execution request: {request.name}")
    mode = executor.get_mode()
    try:
        result = await executor.execute(request.name, request.arguments, context)
    except ToolNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error_detail(e),
        ) from e
    except ToolForbiddenError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=_error_detail(e),
        ) from e
    except ToolValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail={**_error_detail(e), "errors": e.errors},
        ) from e

    return ToolExecuteResponse(name=request.name, mode=mode, result=result)
