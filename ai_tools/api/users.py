"""User API routes (authenticated, rate limited).

Provides:
    GET /users/{user_id} — Public profile of one user.
"""

import logging
import uuid

from fastapi import APIRouter
from pydantic import BaseModel

from ai_tools.api.dependencies import DBDep, RateLimitedCallerDep
from ai_tools.exceptions import NotFoundError
from ai_tools.queries import get_user_by_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


class UserResponse(BaseModel):
    id: str
    email: str
    name: str | None


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user")
async def get_user(user_id: uuid.UUID, db: DBDep, caller: RateLimitedCallerDep) -> UserResponse:
    """Return ``{id, email, name}``.

    Raises:
        UnauthorizedError: 401 without a valid bearer token.
        RateLimitError: 429 once the caller's window budget is spent.
        NotFoundError: 404 for an unknown id.
    """
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("user", user_id)

    logger.debug("User %s fetched by %s", user_id, caller.user_id)
    return UserResponse(id=str(user.id), email=user.email, name=user.name)
