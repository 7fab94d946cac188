"""
API Dependencies

FastAPI dependency injection functions for the API layer.

Pattern: Centralized dependency injection following FastAPI best practices.
All dependencies are factory functions that can be overridden in tests
using FastAPI's dependency_overrides mechanism.

Caller identity is established upstream (JWT validation happens in the
authentication layer in front of this service) and forwarded as headers:
- X-User-Id: authenticated user id (missing -> empty, rejected by the executor)
- X-Company-Id: the user's company, optional
- X-User-Role: admin | owner | staff | tenant (missing or unknown -> 401)
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from tool_gateway.core.config import Settings, get_settings as _get_settings
from tool_gateway.models.domain import ExecutionContext, UserRole
from tool_gateway.tools.executor import ToolExecutor, get_tool_executor as _get_executor
from tool_gateway.tools.registry import ToolRegistry, get_tool_registry as _get_registry

logger = logging.getLogger(__name__)


def get_settings() -> Settings:
    """
    Get application settings.

    Pattern: Singleton with @lru_cache (from core.config)
    """
    return _get_settings()


def get_tool_executor() -> ToolExecutor:
    """Get the global ToolExecutor."""
    return _get_executor()


def get_tool_registry() -> ToolRegistry:
    """Get the global ToolRegistry."""
    return _get_registry()


def get_execution_context(
    x_user_id: Optional[str] = Header(default=None),
    x_company_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> ExecutionContext:
    """
    Build the caller's ExecutionContext from identity headers.

    Raises:
        HTTPException 401: Missing or unknown role.
    """
    try:
        role = UserRole((x_user_role or "").strip().lower())
    except ValueError:
        logger.warning(f"Rejected request with invalid role header: {x_user_role!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid user role",
        )

    return ExecutionContext(
        user_id=(x_user_id or "").strip(),
        company_id=x_company_id or None,
        role=role,
    )


__all__ = [
    "get_settings",
    "get_tool_executor",
    "get_tool_registry",
    "get_execution_context",
]
