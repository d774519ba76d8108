"""FastAPI application configuration and setup.

Main entry point for the HTTP API with CORS, middleware,
rate limiting, and lifecycle management.
"""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src import __version__
from src.api.auth import verify_api_key
from src.api.rate_limit import limiter
from src.api.routes import api_router
from src.exceptions import (
    ConfigurationError,
    DALError,
    NotFoundError,
    PlannerError,
    QuotaExceededError,
    ValidationError,
)
from src.logging_config import configure_logging
from src.settings import Settings, get_settings
from src.storage import close_db, init_db

# Context variable for correlation ID (async-safe)
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Singleton app instance
_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    - Startup: configure logging, verify the database connection
    - Shutdown: close snapshot streams, then database connections
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    if settings.environment != "testing":
        await init_db()

    yield

    # Close SSE streams so uvicorn can complete graceful shutdown/reload
    from src.api.routes.stream import signal_shutdown

    signal_shutdown()
    await close_db()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Optional settings override (uses get_settings() if not provided)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="House Planner",
        description="Smart home device catalog and house planner",
        version=__version__,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    relaxed = settings.environment in ("development", "testing")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_get_allowed_origins(settings),
        allow_credentials=True,
        allow_methods=["*"] if relaxed else ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"] if relaxed else ["Content-Type", "X-API-Key", "X-Correlation-ID"],
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.middleware("http")(_body_size_limit_middleware)
    app.middleware("http")(_security_headers_middleware)
    app.middleware("http")(_correlation_middleware)

    # Lazy import to avoid circular dependency
    from src.api.middleware import RequestLoggingMiddleware

    app.add_middleware(RequestLoggingMiddleware)

    # Auth is applied globally but exempts health endpoints (handled in auth.py)
    app.include_router(api_router, prefix="/api/v1", dependencies=[Depends(verify_api_key)])

    _register_exception_handlers(app)

    return app


def _get_allowed_origins(settings: Settings) -> list[str]:
    """Get allowed CORS origins.

    An explicit ALLOWED_ORIGINS (comma-separated) wins; otherwise any
    origin in development/testing and only the UI origin elsewhere.
    """
    if settings.allowed_origins:
        return [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
    if settings.environment in ("development", "testing"):
        return ["*"]
    return [settings.ui_origin]


async def _body_size_limit_middleware(request: Request, call_next):
    """Reject requests whose declared body exceeds MAX_REQUEST_BODY_BYTES with 413."""
    from fastapi.responses import JSONResponse

    from src.api.rate_limit import MAX_REQUEST_BODY_BYTES

    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_BODY_BYTES:
        return JSONResponse(
            status_code=413,
            content={
                "error": {
                    "code": 413,
                    "message": f"Request body too large. Maximum size is {MAX_REQUEST_BODY_BYTES} bytes.",
                    "type": "request_too_large",
                }
            },
        )

    return await call_next(request)


async def _security_headers_middleware(request: Request, call_next):
    """Add security-related HTTP headers to every response."""
    settings = get_settings()
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    if settings.environment in ("production", "staging"):
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    # API endpoints return JSON or event streams only
    response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

    if request.url.path.startswith("/api/"):
        response.headers.setdefault("Cache-Control", "no-store, no-cache, must-revalidate")

    return response


async def _correlation_middleware(request: Request, call_next):
    """Generate or propagate the X-Correlation-ID of a request."""
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
    _correlation_id.set(correlation_id)

    response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


def get_correlation_id() -> str | None:
    """Get the current request's correlation ID from context.

    Returns:
        Correlation ID string or None if not in request context
    """
    return _correlation_id.get()


def _status_for(exc: PlannerError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, QuotaExceededError):
        return 409
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, DALError):
        return 503
    if isinstance(exc, ConfigurationError):
        return 500
    return 500


def _register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers.

    Args:
        app: FastAPI application
    """
    from fastapi import HTTPException
    from fastapi.responses import JSONResponse

    @app.exception_handler(PlannerError)
    async def planner_error_handler(
        request: Request,
        exc: PlannerError,
    ) -> JSONResponse:
        """Handle planner application errors with correlation ID."""
        settings = get_settings()
        correlation_id = get_correlation_id() or exc.correlation_id
        error_type = exc.__class__.__name__.replace("Error", "_error").lower()
        status_code = _status_for(exc)

        import structlog

        logger = structlog.get_logger()
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "Planner error",
            error_type=error_type,
            correlation_id=correlation_id,
            path=request.url.path,
            exc_info=exc if status_code >= 500 else None,
        )

        # Client errors are actionable; server errors are sanitized outside debug
        if status_code < 500 or settings.debug:
            message = str(exc)
        else:
            message = f"An error occurred. Correlation ID: {correlation_id}"

        content: dict[str, Any] = {
            "code": status_code,
            "message": message,
            "type": error_type,
            "correlation_id": correlation_id,
        }
        if isinstance(exc, QuotaExceededError):
            content["quota"] = {"device_id": exc.device_id, "owned": exc.owned, "used": exc.used}

        return JSONResponse(
            status_code=status_code,
            content={"error": content},
            headers={"X-Correlation-ID": correlation_id},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with consistent format."""
        correlation_id = get_correlation_id() or str(uuid.uuid4())
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.status_code,
                    "message": exc.detail,
                    "type": "http_error",
                    "correlation_id": correlation_id,
                }
            },
            headers={"X-Correlation-ID": correlation_id},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        settings = get_settings()
        correlation_id = get_correlation_id() or str(uuid.uuid4())

        import structlog

        logger = structlog.get_logger()
        logger.exception(
            "Unhandled exception",
            correlation_id=correlation_id,
            exc_info=exc,
        )

        detail = str(exc) if settings.debug else "Internal server error"
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": 500,
                    "message": detail,
                    "type": "internal_error",
                    "correlation_id": correlation_id,
                }
            },
            headers={"X-Correlation-ID": correlation_id},
        )


def get_app() -> FastAPI:
    """Get or create the singleton FastAPI application."""
    global _app
    if _app is None:
        _app = create_app()
    return _app


# For uvicorn: use "src.api.main:get_app" with --factory flag,
# or "src.api.main:app" which lazily initializes on first access.
def __getattr__(name: str) -> Any:
    """Create the app only when ``app`` is accessed, not at import time."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
