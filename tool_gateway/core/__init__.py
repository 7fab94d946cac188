"""
Core module for the AI Tool Gateway.

This module contains configuration, exceptions, and shared utilities.
"""

from tool_gateway.core.config import (
    Settings,
    ToolsModeSettings,
    get_settings,
    get_tools_mode_setting,
)
from tool_gateway.core.exceptions import (
    ErrorCode,
    ToolForbiddenError,
    ToolGatewayException,
    ToolNotFoundError,
    ToolValidationError,
)

__all__ = [
    # Config
    "Settings",
    "ToolsModeSettings",
    "get_settings",
    "get_tools_mode_setting",
    # Exceptions
    "ErrorCode",
    "ToolGatewayException",
    "ToolNotFoundError",
    "ToolForbiddenError",
    "ToolValidationError",
]
