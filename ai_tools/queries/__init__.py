"""Async CRUD query functions over the ORM models.

Every function takes the request-scoped :class:`AsyncSession` as its first
argument and leaves committing to the caller (``get_async_db`` commits on a
clean exit).
"""

from ai_tools.queries.audio_recordings import (
    create_audio_recording,
    delete_audio_recording,
    get_audio_recording_by_id,
    get_user_audio_recordings,
    update_audio_recording_metadata,
    update_audio_recording_status,
)
from ai_tools.queries.users import (
    create_user,
    get_user_by_email,
    get_user_by_id,
    update_user,
)
from ai_tools.queries.voice_generations import (
    create_voice_generation,
    delete_voice_generation,
    get_user_voice_generations,
    get_voice_generation_by_id,
    update_voice_generation_status,
)
from ai_tools.queries.voice_models import (
    create_voice_model,
    delete_voice_model,
    get_user_voice_models,
    get_voice_model_by_id,
    update_voice_model_status,
)

__all__ = [
    "create_user",
    "get_user_by_id",
    "get_user_by_email",
    "update_user",
    "create_audio_recording",
    "get_audio_recording_by_id",
    "get_user_audio_recordings",
    "update_audio_recording_status",
    "update_audio_recording_metadata",
    "delete_audio_recording",
    "create_voice_model",
    "get_voice_model_by_id",
    "get_user_voice_models",
    "update_voice_model_status",
    "delete_voice_model",
    "create_voice_generation",
    "get_voice_generation_by_id",
    "get_user_voice_generations",
    "update_voice_generation_status",
    "delete_voice_generation",
]
