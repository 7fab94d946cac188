"""
Tool Audit Logger

Emits one structured record when a tool call starts and one when it ends
(success or error). Records go through structlog under the
"tool_gateway.audit" logger name.

Emission never affects the outcome of a call: a failure while writing an
audit record is itself logged at debug level and dropped.
"""

from typing import Any, Optional

from tool_gateway.models.domain import ExecutionContext
from tool_gateway.observability.logging import get_logger

AUDIT_LOGGER_NAME = "tool_gateway.audit"

logger = get_logger(__name__)


class ToolAuditLogger:
    """
    Audit trail for tool executions.

    Event names: ai_tool_execution_start, ai_tool_execution_success,
    ai_tool_execution_error.
    """

    def __init__(self, audit_logger: Optional[Any] = None) -> None:
        self._audit = audit_logger or get_logger(AUDIT_LOGGER_NAME)

    def start(
        self, tool_name: str, context: ExecutionContext, arguments: Any
    ) -> None:
        self._emit(
            "ai_tool_execution_start",
            tool_name,
            context,
            {"arguments": arguments},
            error=False,
        )

    def success(
        self, tool_name: str, context: ExecutionContext, latency_ms: float
    ) -> None:
        self._emit(
            "ai_tool_execution_success",
            tool_name,
            context,
            {"latency_ms": round(latency_ms, 2)},
            error=False,
        )

    def error(
        self,
        tool_name: str,
        context: ExecutionContext,
        latency_ms: float,
        exc: BaseException,
    ) -> None:
        self._emit(
            "ai_tool_execution_error",
            tool_name,
            context,
            {
                "latency_ms": round(latency_ms, 2),
                "error": str(exc) or type(exc).__name__,
                "error_type": type(exc).__name__,
            },
            error=True,
        )

    def _emit(
        self,
        event: str,
        tool_name: str,
        context: ExecutionContext,
        data: dict[str, Any],
        error: bool,
    ) -> None:
        try:
            method = self._audit.error if error else self._audit.info
            method(
                event,
                tool_name=tool_name,
                company_id=context.company_id,
                user_id=context.user_id,
                role=context.role.value,
                data=data,
            )
        except Exception as e:
            logger.debug("audit_emit_failed", audit_event=event, error=str(e))
