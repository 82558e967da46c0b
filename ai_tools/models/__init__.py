"""SQLAlchemy ORM models for the AI Tools API."""

from ai_tools.models.audio_recording import AUDIO_RECORDING_STATUSES, AudioRecording
from ai_tools.models.base import Base
from ai_tools.models.user import User
from ai_tools.models.voice_generation import VOICE_GENERATION_STATUSES, VoiceGeneration
from ai_tools.models.voice_model import VOICE_MODEL_STATUSES, VoiceModel

__all__ = [
    "Base",
    "User",
    "AudioRecording",
    "VoiceModel",
    "VoiceGeneration",
    "AUDIO_RECORDING_STATUSES",
    "VOICE_MODEL_STATUSES",
    "VOICE_GENERATION_STATUSES",
]
