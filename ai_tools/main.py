"""AI Tools API — FastAPI application entry point.

Features:
- Lifespan context manager: probes the DB on startup, disposes it on shutdown
- Structured exception handlers for all domain exceptions
- Request/response logging middleware with request-ID tracing
- /health endpoint: checks DB connectivity
- Routers for knowledge generation, text-to-image, voice clone, users, chat
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ai_tools.config import get_settings
from ai_tools.exceptions import (
    DatabaseConnectionError,
    GenerationError,
    NotFoundError,
    ProviderError,
    RateLimitError,
    UnauthorizedError,
    ValidationError,
)
from ai_tools.request_context import (
    configure_logging,
    get_request_id,
    new_request_id,
    reset_request_id,
    set_request_id,
)

# ---------------------------------------------------------------------------
# Logging setup  (must happen before routers are imported)
# ---------------------------------------------------------------------------

_settings = get_settings()
configure_logging(_settings.log_level)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Router and service imports
# ---------------------------------------------------------------------------

from ai_tools.api import chat as _chat_module  # noqa: E402
from ai_tools.api import knowledge as _knowledge_module  # noqa: E402
from ai_tools.api import text_to_image as _text_to_image_module  # noqa: E402
from ai_tools.api import users as _users_module  # noqa: E402
from ai_tools.api import voice_clone as _voice_clone_module  # noqa: E402
from ai_tools.api.envelopes import failure  # noqa: E402
from ai_tools.database import check_db_connection, dispose_engine  # noqa: E402
from ai_tools.schemas.common import HealthResponse  # noqa: E402
from ai_tools.services.generator import utc_now_iso  # noqa: E402
from ai_tools.services.rate_limiter import SlidingWindowRateLimiter  # noqa: E402
from ai_tools.services.request_validator import errors_from_pydantic  # noqa: E402

# Register all ORM models with the declarative base (required for metadata)
import ai_tools.models  # noqa: F401, E402

REQUEST_ID_HEADER = "X-Request-ID"

# ---------------------------------------------------------------------------
# Lifespan context manager
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle.

    Startup probes DB connectivity and logs the result (non-fatal).
    Shutdown disposes the SQLAlchemy connection pool.
    """
    logger.info(
        "AI Tools API — starting up (v%s, %s)", _settings.app_version, _settings.environment
    )

    db_health = await check_db_connection()
    if db_health["status"] == "ok":
        logger.info("Database: OK")
    else:
        logger.warning("Database: DEGRADED — %s", db_health.get("detail", "unknown"))

    logger.info("Startup complete — serving requests")
    yield

    logger.info("AI Tools API — shutting down")
    try:
        await dispose_engine()
    except Exception as exc:
        logger.warning("Error during engine disposal: %s", exc)
    logger.info("Shutdown complete")


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="AI Tools API",
    description=(
        "Gateway for AI-powered learning tools: outline and quiz generation "
        "across several model providers, text-to-infographic rendering and "
        "voice sample management."
    ),
    version=_settings.app_version,
    debug=_settings.debug,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "health", "description": "System health and readiness checks."},
        {
            "name": "knowledge",
            "description": "Learning outlines and practice questions, batch or streamed.",
        },
        {
            "name": "text-to-image",
            "description": "Principle breakdowns and five-panel infographic images.",
        },
        {"name": "voice-clone", "description": "Voice sample upload and management."},
        {"name": "users", "description": "User lookup (bearer auth, rate limited)."},
        {"name": "chat", "description": "Multi-model chat placeholders."},
    ],
)

app.state.rate_limiter = SlidingWindowRateLimiter(
    limit=_settings.rate_limit_requests,
    window_seconds=_settings.rate_limit_window_seconds,
)

# ---------------------------------------------------------------------------
# CORS middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "X-Requested-With",
        "Origin",
        REQUEST_ID_HEADER,
    ],
    expose_headers=["Content-Length", REQUEST_ID_HEADER],
    max_age=86400,
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next: Any) -> Response:
    """Log every HTTP request with method, path, status, and duration.

    The ``X-Request-ID`` header is honoured when present; otherwise a short
    random id is generated.  Either way it is bound to the logging context
    and echoed on the response.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
    request.state.request_id = request_id
    token = set_request_id(request_id)
    t0 = time.monotonic()
    logger.info("→ %s %s", request.method, request.url.path)

    try:
        response: Response = await call_next(request)
    except Exception as exc:
        elapsed = (time.monotonic() - t0) * 1000
        logger.error(
            "✗ %s %s — unhandled after %.1f ms: %s",
            request.method,
            request.url.path,
            elapsed,
            exc,
        )
        raise
    finally:
        reset_request_id(token)

    elapsed = (time.monotonic() - t0) * 1000
    logger.info(
        "← %s %s — %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed,
        extra={"request_id": request_id},
    )
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


# ---------------------------------------------------------------------------
# Structured exception handlers
# ---------------------------------------------------------------------------


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or get_request_id()


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    request_id = _request_id(request)
    return JSONResponse(
        status_code=status_code,
        content=failure(error, request_id=request_id, **extra),
        headers={REQUEST_ID_HEADER: request_id, **(headers or {})},
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """400 for request payloads that violate their schema."""
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "validation_failed",
        message=str(exc),
        errors=exc.errors,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """400 for malformed bodies and bad query/path/form parameters."""
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "validation_failed",
        message="Invalid request",
        errors=errors_from_pydantic(list(exc.errors())),
    )


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    """500 when the requested provider cannot be used."""
    logger.error("ProviderError: %s", exc)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "provider_error",
        message=str(exc),
        provider=exc.provider,
    )


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    """500 for upstream model failures."""
    logger.error("GenerationError (model=%s): %s", exc.model, exc)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "generation_failed",
        message=str(exc),
        model=exc.model,
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(
        request,
        status.HTTP_404_NOT_FOUND,
        f"{exc.resource}_not_found",
        message=str(exc),
    )


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> JSONResponse:
    return _error_response(
        request,
        status.HTTP_401_UNAUTHORIZED,
        "unauthorized",
        message=str(exc),
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(RateLimitError)
async def rate_limit_handler(request: Request, exc: RateLimitError) -> JSONResponse:
    logger.warning("Rate limit exceeded; retry after %ds", exc.retry_after)
    return _error_response(
        request,
        status.HTTP_429_TOO_MANY_REQUESTS,
        "rate_limit_exceeded",
        headers={"Retry-After": str(exc.retry_after)},
        message=str(exc),
        retryAfter=exc.retry_after,
    )


@app.exception_handler(DatabaseConnectionError)
async def database_connection_error_handler(
    request: Request, exc: DatabaseConnectionError
) -> JSONResponse:
    """503 for database connectivity failures."""
    logger.error("DatabaseConnectionError: %s", exc)
    return _error_response(
        request,
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "database_unavailable",
        message=str(exc),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render FastAPI HTTPExceptions as structured JSON."""
    return _error_response(
        request,
        exc.status_code,
        "http_error",
        message=str(exc.detail),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
    )


# ---------------------------------------------------------------------------
# Core routes
# ---------------------------------------------------------------------------


@app.get("/", tags=["health"], summary="API root / service info")
async def root() -> dict[str, str]:
    """Return basic service metadata and navigation links."""
    return {
        "service": "AI Tools API",
        "version": _settings.app_version,
        "documentation": "/docs",
        "health": "/health",
        "openapi": "/openapi.json",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="System health check",
    description=(
        "Probes database connectivity. ``status: ok`` means all subsystems are"
        " healthy; ``status: degraded`` means the API is responding but the"
        " database is unavailable."
    ),
)
async def health_check() -> HealthResponse:
    db_health = await check_db_connection()
    return HealthResponse(
        status="ok" if db_health["status"] == "ok" else "degraded",
        timestamp=utc_now_iso(),
        version=_settings.app_version,
        environment=_settings.environment,
        database=db_health,
    )


# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------

app.include_router(_knowledge_module.router)
app.include_router(_text_to_image_module.router)
app.include_router(_voice_clone_module.router)
app.include_router(_users_module.router)
app.include_router(_chat_module.router)


# ---------------------------------------------------------------------------
# Development entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ai_tools.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=_settings.log_level.lower(),
    )
