"""Request logging middleware for FastAPI.

Logs request method, path, status code, duration and correlation ID
as structured events.
"""

import time
from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

# Long-lived streams are logged when they open, not when they end
_STREAM_PATH_SUFFIX = "/stream"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one structured line per request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        # Lazy import to avoid circular dependency
        from src.api.main import get_correlation_id

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_error",
                method=request.method,
                path=request.url.path,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
                correlation_id=get_correlation_id(),
                error_type=type(e).__name__,
                exc_info=e,
            )
            raise

        logger.info(
            "stream_opened" if request.url.path.endswith(_STREAM_PATH_SUFFIX) else "request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
            correlation_id=get_correlation_id(),
        )
        return response
