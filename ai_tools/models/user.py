"""SQLAlchemy ORM model for the users table."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ai_tools.models.base import Base

if TYPE_CHECKING:
    from ai_tools.models.audio_recording import AudioRecording
    from ai_tools.models.voice_generation import VoiceGeneration
    from ai_tools.models.voice_model import VoiceModel


class User(Base):
    """Account that owns uploaded recordings, voice models and generations.

    Attributes:
        id: UUID primary key, auto-generated.
        email: Unique login e-mail.
        name: Optional display name.
        created_at: Timestamp of record creation.
        updated_at: Timestamp of last update.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )

    audio_recordings: Mapped[List[AudioRecording]] = relationship(
        "AudioRecording", back_populates="user"
    )
    voice_models: Mapped[List[VoiceModel]] = relationship(
        "VoiceModel", back_populates="user"
    )
    voice_generations: Mapped[List[VoiceGeneration]] = relationship(
        "VoiceGeneration", back_populates="user"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
