"""
Request Logging Middleware

Request/response logging middleware for the API.

- Sets the correlation id for the request from X-Request-ID, or generates
  one, and echoes it on the response.
- Logs method, path, status and duration through structlog.
- Redacts sensitive headers (Authorization, API keys, cookies).

Reference Documents:
- GUIDELINES: Sinha pp. 89-91 (FastAPI middleware patterns)
- ANTI_PATTERN_ANALYSIS: §3.1 No bare except clauses
"""

import time
import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from tool_gateway.observability.logging import correlation_id_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Headers that should be redacted (case-insensitive substring match)
SENSITIVE_HEADER_PATTERNS = [
    "authorization",
    "api-key",
    "apikey",
    "api_key",
    "x-auth-token",
    "cookie",
]


def redact_sensitive_headers(headers: dict[str, str]) -> dict[str, str]:
    """
    Redact sensitive headers from a headers dictionary.

    Pattern: Security - prevent credential leakage in logs

    Args:
        headers: Dictionary of HTTP headers

    Returns:
        Dictionary with sensitive values replaced with [REDACTED]
    """
    redacted = {}
    for key, value in headers.items():
        key_lower = key.lower()
        is_sensitive = any(pattern in key_lower for pattern in SENSITIVE_HEADER_PATTERNS)
        redacted[key] = "[REDACTED]" if is_sensitive else value
    return redacted


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.

    Pattern: BaseHTTPMiddleware for request/response interception
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"

        with correlation_id_context(request_id):
            logger.debug(
                "request_started",
                method=method,
                path=path,
                client=client_host,
                headers=redact_sensitive_headers(dict(request.headers)),
            )

            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "request_failed",
                    method=method,
                    path=path,
                    client=client_host,
                    error=f"{type(e).__name__}: {e}",
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                )
                raise

            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            log = logger.warning if response.status_code >= 400 else logger.info
            log(
                "request_completed",
                method=method,
                path=path,
                status=response.status_code,
                client=client_host,
                duration_ms=duration_ms,
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
