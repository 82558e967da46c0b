"""Voice clone API routes.

Provides:
    POST   /voice-clone/upload            — Store a voice sample for cloning.
    GET    /voice-clone/recordings        — A user's samples, newest first.
    GET    /voice-clone/download/{id}     — The stored audio file.
    DELETE /voice-clone/recordings/{id}   — Remove a sample and its file.
"""

import logging
import math
import time
import uuid
from pathlib import Path
from typing import Any

from fastapi import APIRouter, File, Form, Query, UploadFile
from fastapi.responses import FileResponse
from starlette.concurrency import run_in_threadpool

from ai_tools.api.dependencies import DBDep, SettingsDep
from ai_tools.api.envelopes import success
from ai_tools.exceptions import NotFoundError, ValidationError
from ai_tools.models.audio_recording import AudioRecording
from ai_tools.queries import (
    create_audio_recording,
    delete_audio_recording,
    get_audio_recording_by_id,
    get_user_audio_recordings,
    get_user_by_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/voice-clone", tags=["voice-clone"])

_DEFAULT_EXTENSION = ".wav"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _recording_payload(recording: AudioRecording) -> dict[str, Any]:
    return {
        "id": str(recording.id),
        "userId": str(recording.user_id),
        "fileName": recording.file_name,
        "originalName": recording.original_name,
        "filePath": recording.file_path,
        "fileSize": recording.file_size,
        "duration": float(recording.duration) if recording.duration is not None else 0.0,
        "format": recording.format,
        "status": recording.status,
        "createdAt": recording.created_at.isoformat() if recording.created_at else None,
    }


def _stored_file_name(original_name: str | None) -> str:
    extension = Path(original_name or "").suffix or _DEFAULT_EXTENSION
    return f"{uuid.uuid4().hex}_{int(time.time() * 1000)}{extension}"


def _write_file(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


def _remove_file(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        logger.warning("Audio file already gone: %s", path)


def _parse_duration(raw: str) -> float:
    try:
        duration = float(raw)
    except ValueError:
        duration = math.nan
    if math.isnan(duration) or math.isinf(duration):
        raise ValidationError(
            "Invalid duration",
            errors=[{"field": "duration", "reason": "must be a number of seconds"}],
        )
    return duration


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/upload", summary="Upload a voice sample")
async def upload_audio(
    db: DBDep,
    settings: SettingsDep,
    audio: UploadFile = File(..., description="Audio file"),
    duration: str = Form(..., description="Audio duration in seconds"),
    user_id: uuid.UUID = Form(..., alias="userId"),
):
    """Validate and store an uploaded recording.

    Raises:
        ValidationError: 400 for a non-audio type, an oversized file or a
            too-short duration.
        NotFoundError: 404 when ``userId`` does not exist.
    """
    content_type = audio.content_type or ""
    if not content_type.startswith("audio/"):
        raise ValidationError(
            "Invalid file type",
            errors=[{"field": "audio", "reason": "only audio files are allowed"}],
        )

    seconds = _parse_duration(duration)
    if seconds < settings.min_audio_duration_seconds:
        raise ValidationError(
            "Invalid duration",
            errors=[
                {
                    "field": "duration",
                    "reason": f"must be at least {settings.min_audio_duration_seconds:g} seconds",
                }
            ],
        )

    content = await audio.read()
    if not content:
        raise ValidationError(
            "No audio file provided",
            errors=[{"field": "audio", "reason": "file is empty"}],
        )
    if len(content) > settings.max_upload_bytes:
        raise ValidationError(
            "File too large",
            errors=[
                {
                    "field": "audio",
                    "reason": f"maximum file size is {settings.max_upload_bytes} bytes",
                }
            ],
        )

    if await get_user_by_id(db, user_id) is None:
        raise NotFoundError("user", user_id)

    file_name = _stored_file_name(audio.filename)
    path = (Path(settings.upload_dir) / "audio" / file_name).resolve()
    await run_in_threadpool(_write_file, path, content)

    try:
        recording = await create_audio_recording(
            db,
            user_id=user_id,
            file_name=file_name,
            original_name=audio.filename,
            file_path=str(path),
            file_size=len(content),
            duration=seconds,
            format="wav",
            status="completed",
        )
        await db.commit()
    except Exception:
        logger.error("Could not record upload %s, removing the stored file", file_name)
        await run_in_threadpool(_remove_file, path)
        raise

    logger.info(
        "Stored audio recording %s (%d bytes, %.1fs)", recording.id, len(content), seconds
    )
    return success(_recording_payload(recording))


@router.get("/recordings", summary="List a user's recordings")
async def list_recordings(db: DBDep, user_id: uuid.UUID = Query(..., alias="userId")):
    recordings = await get_user_audio_recordings(db, user_id)
    return success([_recording_payload(r) for r in recordings])


@router.get("/download/{recording_id}", summary="Download a recording")
async def download_recording(recording_id: uuid.UUID, db: DBDep) -> FileResponse:
    recording = await get_audio_recording_by_id(db, recording_id)
    if recording is None:
        raise NotFoundError("audio_recording", recording_id)

    path = Path(recording.file_path)
    if not path.is_file():
        logger.error("Recording %s points at missing file %s", recording_id, path)
        raise NotFoundError("audio_file", recording_id)

    return FileResponse(
        path,
        media_type=f"audio/{recording.format}",
        filename=recording.original_name or recording.file_name,
    )


@router.delete("/recordings/{recording_id}", summary="Delete a recording")
async def remove_recording(
    recording_id: uuid.UUID,
    db: DBDep,
    user_id: uuid.UUID = Query(..., alias="userId"),
):
    """Delete a recording owned by ``userId`` together with its file.

    The file is only removed once the row deletion has been committed.
    """
    recording = await delete_audio_recording(db, recording_id, user_id)
    if recording is None:
        raise NotFoundError("audio_recording", recording_id)

    await db.commit()
    await run_in_threadpool(_remove_file, Path(recording.file_path))
    return success({"id": str(recording_id), "deleted": True})
