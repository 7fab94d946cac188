"""
Custom exceptions for the AI Tool Gateway.

This module provides a hierarchy of custom exceptions for the gateway.
All exceptions inherit from ToolGatewayException and include error codes for
consistent error handling and API responses.

Only rejections raised by the gateway itself live here. Errors raised by a
tool's business logic are never wrapped: they propagate to the caller
unchanged.

Reference:
- GUIDELINES: Specific exceptions, always capture with 'as e'
"""

from enum import Enum
from typing import Any


# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(str, Enum):
    """
    Error codes for gateway exceptions.

    These codes provide a consistent way to identify error types
    across the API and in logging.
    """

    GATEWAY_ERROR = "GATEWAY_ERROR"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    TOOL_FORBIDDEN = "TOOL_FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# Message returned to callers for every authorization rejection. The
# specific reason is kept on the exception for logs only.
FORBIDDEN_MESSAGE = "Tool execution is not allowed"


# =============================================================================
# Base Exception
# =============================================================================


class ToolGatewayException(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GATEWAY_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)


# =============================================================================
# ToolNotFoundError
# =============================================================================


class ToolNotFoundError(ToolGatewayException):
    """
    Raised when a requested tool is not in the catalog.

    Attributes:
        tool_name: Name that failed to resolve.
    """

    def __init__(
        self,
        tool_name: str,
        error_code: str = ErrorCode.TOOL_NOT_FOUND,
        **kwargs: Any,
    ) -> None:
        super().__init__(f"Tool not found: {tool_name}", error_code, **kwargs)
        self.tool_name = tool_name


# =============================================================================
# ToolForbiddenError
# =============================================================================


class ToolForbiddenError(ToolGatewayException):
    """
    Raised when the mode, role, or context gate rejects a call.

    The message is always the generic FORBIDDEN_MESSAGE so callers cannot
    probe which gate failed.

    Attributes:
        tool_name: Name of the rejected tool.
        reason: Internal reason ("mode", "role" or "context"), for logs only.
    """

    def __init__(
        self,
        tool_name: str,
        reason: str,
        error_code: str = ErrorCode.TOOL_FORBIDDEN,
        **kwargs: Any,
    ) -> None:
        super().__init__(FORBIDDEN_MESSAGE, error_code, **kwargs)
        self.tool_name = tool_name
        self.reason = reason


# =============================================================================
# ToolValidationError
# =============================================================================


class ToolValidationError(ToolGatewayException):
    """
    Raised when tool arguments fail validation against the tool's schema.

    Note: Named ToolValidationError to avoid conflict with
    pydantic.ValidationError.

    Attributes:
        tool_name: Name of the tool whose arguments were rejected.
        errors: Structured error list (pydantic's errors() format).
    """

    def __init__(
        self,
        message: str,
        tool_name: str,
        errors: list[dict[str, Any]] | None = None,
        error_code: str = ErrorCode.VALIDATION_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the validation error.

        Args:
            message: Human-readable error message.
            tool_name: Name of the tool.
            errors: Structured validation errors (optional).
            error_code: Machine-readable error code.
            **kwargs: Additional attributes.
        """
        super().__init__(message, error_code, **kwargs)
        self.tool_name = tool_name
        self.errors = errors or []
