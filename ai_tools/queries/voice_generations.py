"""Queries for the voice_generations table."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ai_tools.models.voice_generation import VOICE_GENERATION_STATUSES, VoiceGeneration
from ai_tools.queries._common import check_status


async def create_voice_generation(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    voice_model_id: uuid.UUID,
    text: str,
    fal_request_id: str | None = None,
) -> VoiceGeneration:
    generation = VoiceGeneration(
        user_id=user_id,
        voice_model_id=voice_model_id,
        text=text,
        fal_request_id=fal_request_id,
        status="processing",
    )
    db.add(generation)
    await db.flush()
    await db.refresh(generation)
    return generation


async def get_voice_generation_by_id(
    db: AsyncSession, generation_id: uuid.UUID
) -> VoiceGeneration | None:
    return await db.get(VoiceGeneration, generation_id)


async def get_user_voice_generations(
    db: AsyncSession, user_id: uuid.UUID
) -> Sequence[VoiceGeneration]:
    stmt = (
        select(VoiceGeneration)
        .where(VoiceGeneration.user_id == user_id)
        .order_by(VoiceGeneration.created_at.desc())
    )
    result = await db.execute(stmt)
    return result.scalars().all()


async def update_voice_generation_status(
    db: AsyncSession,
    generation_id: uuid.UUID,
    status: str,
    *,
    audio_url: str | None = None,
    duration: Decimal | float | None = None,
    error_message: str | None = None,
) -> VoiceGeneration | None:
    check_status(status, VOICE_GENERATION_STATUSES)
    values: dict[str, object] = {"status": status, "updated_at": func.now()}
    if audio_url is not None:
        values["audio_url"] = audio_url
    if duration is not None:
        values["duration"] = Decimal(str(duration))
    if error_message is not None:
        values["error_message"] = error_message

    stmt = (
        update(VoiceGeneration)
        .where(VoiceGeneration.id == generation_id)
        .values(**values)
        .returning(VoiceGeneration)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def delete_voice_generation(
    db: AsyncSession, generation_id: uuid.UUID, user_id: uuid.UUID
) -> bool:
    """Delete a generation owned by *user_id*; return whether a row was removed."""
    stmt = (
        delete(VoiceGeneration)
        .where(VoiceGeneration.id == generation_id, VoiceGeneration.user_id == user_id)
        .returning(VoiceGeneration.id)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none() is not None
