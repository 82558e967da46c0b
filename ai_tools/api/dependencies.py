"""FastAPI dependency injection helpers.

Provides reusable ``Depends``-compatible callables for:
- ``get_db()``              → async database session
- ``get_settings()``        → application settings
- ``get_*_generator()``     → structured generators (overridable in tests)
- ``get_current_caller()``  → authenticated caller for protected routes
- ``enforce_rate_limit()``  → per-caller sliding window budget
"""

import logging
from dataclasses import dataclass
from typing import Annotated

import jwt
from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ai_tools.config import Settings
from ai_tools.config import get_settings as _get_settings_impl
from ai_tools.database import get_async_db
from ai_tools.exceptions import UnauthorizedError
from ai_tools.services.generator import OutlineGenerator, PrincipleGenerator, QuestionGenerator
from ai_tools.services.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "sk-"
API_KEY_CALLER_ID = "api-user"


# ---------------------------------------------------------------------------
# Database session
# ---------------------------------------------------------------------------


async def get_db(
    db: AsyncSession = Depends(get_async_db),
) -> AsyncSession:
    """Provide an async database session to route handlers."""
    return db


DBDep = Annotated[AsyncSession, Depends(get_db)]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def get_settings() -> Settings:
    return _get_settings_impl()


SettingsDep = Annotated[Settings, Depends(get_settings)]


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------


def get_outline_generator() -> OutlineGenerator:
    return OutlineGenerator()


def get_question_generator() -> QuestionGenerator:
    return QuestionGenerator()


def get_principle_generator() -> PrincipleGenerator:
    return PrincipleGenerator()


OutlineGeneratorDep = Annotated[OutlineGenerator, Depends(get_outline_generator)]
QuestionGeneratorDep = Annotated[QuestionGenerator, Depends(get_question_generator)]
PrincipleGeneratorDep = Annotated[PrincipleGenerator, Depends(get_principle_generator)]


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    """Identity attached to an authenticated request."""

    user_id: str
    email: str | None = None
    via_api_key: bool = False


def authenticate_token(token: str, settings: Settings) -> Caller:
    """Turn a bearer token into a :class:`Caller`.

    ``sk-`` tokens must equal the configured service key; anything else is
    verified as a JWT signed with ``settings.jwt_secret``.

    Raises:
        UnauthorizedError: If the token is rejected.
    """
    if token.startswith(API_KEY_PREFIX):
        if not settings.api_key or token != settings.api_key:
            raise UnauthorizedError("Invalid API key")
        return Caller(user_id=API_KEY_CALLER_ID, via_api_key=True)

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise UnauthorizedError() from exc

    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedError("Invalid token: missing subject")
    return Caller(user_id=str(subject), email=payload.get("email"))


async def get_current_caller(
    settings: SettingsDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Caller:
    if credentials is None:
        raise UnauthorizedError("Missing authorization header")
    return authenticate_token(credentials.credentials, settings)


CallerDep = Annotated[Caller, Depends(get_current_caller)]


# ---------------------------------------------------------------------------
# Rate limiting (limiter stored on app.state by create_app)
# ---------------------------------------------------------------------------


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    return request.app.state.rate_limiter


async def enforce_rate_limit(
    request: Request,
    response: Response,
    caller: CallerDep,
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
) -> Caller:
    """Charge one request to *caller*'s budget; 429 once it is spent."""
    key = caller.user_id or request.headers.get("x-forwarded-for") or "anonymous"
    remaining = limiter.hit(key)
    response.headers["X-RateLimit-Limit"] = str(limiter.limit)
    response.headers["X-RateLimit-Remaining"] = str(remaining)
    return caller


RateLimitedCallerDep = Annotated[Caller, Depends(enforce_rate_limit)]
