"""Queries for the audio_recordings table."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ai_tools.models.audio_recording import AUDIO_RECORDING_STATUSES, AudioRecording
from ai_tools.queries._common import check_status


async def create_audio_recording(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    file_name: str,
    file_path: str,
    file_size: int,
    original_name: str | None = None,
    duration: Decimal | float | None = None,
    format: str = "wav",
    status: str = "processing",
) -> AudioRecording:
    """Insert a recording row and return it with server defaults loaded."""
    check_status(status, AUDIO_RECORDING_STATUSES)
    recording = AudioRecording(
        user_id=user_id,
        file_name=file_name,
        original_name=original_name,
        file_path=file_path,
        file_size=file_size,
        duration=Decimal(str(duration)) if duration is not None else None,
        format=format,
        status=status,
    )
    db.add(recording)
    await db.flush()
    await db.refresh(recording)
    return recording


async def get_audio_recording_by_id(
    db: AsyncSession, recording_id: uuid.UUID
) -> AudioRecording | None:
    return await db.get(AudioRecording, recording_id)


async def get_user_audio_recordings(
    db: AsyncSession, user_id: uuid.UUID
) -> Sequence[AudioRecording]:
    """Return the user's recordings, newest first."""
    stmt = (
        select(AudioRecording)
        .where(AudioRecording.user_id == user_id)
        .order_by(AudioRecording.created_at.desc())
    )
    result = await db.execute(stmt)
    return result.scalars().all()


async def update_audio_recording_status(
    db: AsyncSession,
    recording_id: uuid.UUID,
    status: str,
    metadata: str | None = None,
) -> AudioRecording | None:
    check_status(status, AUDIO_RECORDING_STATUSES)
    values: dict[str, object] = {"status": status, "updated_at": func.now()}
    if metadata is not None:
        values["metadata_json"] = metadata
    stmt = (
        update(AudioRecording)
        .where(AudioRecording.id == recording_id)
        .values(**values)
        .returning(AudioRecording)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def update_audio_recording_metadata(
    db: AsyncSession,
    recording_id: uuid.UUID,
    *,
    duration: Decimal | float | None = None,
    sample_rate: int | None = None,
    bit_rate: int | None = None,
    channels: int | None = None,
    metadata: str | None = None,
) -> AudioRecording | None:
    """Update the technical metadata fields that were supplied (non-``None``)."""
    values: dict[str, object] = {"updated_at": func.now()}
    if duration is not None:
        values["duration"] = Decimal(str(duration))
    if sample_rate is not None:
        values["sample_rate"] = sample_rate
    if bit_rate is not None:
        values["bit_rate"] = bit_rate
    if channels is not None:
        values["channels"] = channels
    if metadata is not None:
        values["metadata_json"] = metadata

    stmt = (
        update(AudioRecording)
        .where(AudioRecording.id == recording_id)
        .values(**values)
        .returning(AudioRecording)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def delete_audio_recording(
    db: AsyncSession, recording_id: uuid.UUID, user_id: uuid.UUID
) -> AudioRecording | None:
    """Delete a recording owned by *user_id*.

    Returns:
        The deleted row, or ``None`` when no recording with that id belongs
        to the user.
    """
    stmt = (
        delete(AudioRecording)
        .where(AudioRecording.id == recording_id, AudioRecording.user_id == user_id)
        .returning(AudioRecording)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()
