"""Queries for the users table."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ai_tools.models.user import User

_UPDATABLE_FIELDS = frozenset({"email", "name"})


async def create_user(db: AsyncSession, *, email: str, name: str | None = None) -> User:
    user = User(email=email, name=name)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def get_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def update_user(
    db: AsyncSession, user_id: uuid.UUID, **updates: Any
) -> User | None:
    """Update ``email`` and/or ``name``; other keys raise ``TypeError``.

    Returns:
        The updated user, or ``None`` when no user has that id.
    """
    unknown = set(updates) - _UPDATABLE_FIELDS
    if unknown:
        raise TypeError(f"Cannot update user fields: {sorted(unknown)}")

    stmt = (
        update(User)
        .where(User.id == user_id)
        .values(**updates, updated_at=func.now())
        .returning(User)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()
