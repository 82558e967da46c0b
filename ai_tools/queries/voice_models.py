"""Queries for the voice_models table."""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ai_tools.models.voice_model import VOICE_MODEL_STATUSES, VoiceModel
from ai_tools.queries._common import check_status


async def create_voice_model(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    voice_name: str,
    audio_recording_id: uuid.UUID | None = None,
    description: str | None = None,
) -> VoiceModel:
    voice_model = VoiceModel(
        user_id=user_id,
        voice_name=voice_name,
        audio_recording_id=audio_recording_id,
        description=description,
        status="training",
        training_progress=0,
    )
    db.add(voice_model)
    await db.flush()
    await db.refresh(voice_model)
    return voice_model


async def get_voice_model_by_id(
    db: AsyncSession, voice_model_id: uuid.UUID
) -> VoiceModel | None:
    return await db.get(VoiceModel, voice_model_id)


async def get_user_voice_models(
    db: AsyncSession, user_id: uuid.UUID, *, active_only: bool = False
) -> Sequence[VoiceModel]:
    stmt = select(VoiceModel).where(VoiceModel.user_id == user_id)
    if active_only:
        stmt = stmt.where(VoiceModel.is_active.is_(True))
    result = await db.execute(stmt.order_by(VoiceModel.created_at.desc()))
    return result.scalars().all()


async def update_voice_model_status(
    db: AsyncSession,
    voice_model_id: uuid.UUID,
    status: str,
    *,
    training_progress: int | None = None,
    fal_voice_id: str | None = None,
) -> VoiceModel | None:
    check_status(status, VOICE_MODEL_STATUSES)
    values: dict[str, object] = {"status": status, "updated_at": func.now()}
    if training_progress is not None:
        values["training_progress"] = max(0, min(100, training_progress))
    elif status == "ready":
        values["training_progress"] = 100
    if fal_voice_id is not None:
        values["fal_voice_id"] = fal_voice_id

    stmt = (
        update(VoiceModel)
        .where(VoiceModel.id == voice_model_id)
        .values(**values)
        .returning(VoiceModel)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def delete_voice_model(
    db: AsyncSession, voice_model_id: uuid.UUID, user_id: uuid.UUID
) -> bool:
    """Delete a voice model owned by *user_id*; return whether a row was removed."""
    stmt = (
        delete(VoiceModel)
        .where(VoiceModel.id == voice_model_id, VoiceModel.user_id == user_id)
        .returning(VoiceModel.id)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none() is not None
