"""SQLAlchemy ORM model for the voice_models table."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ai_tools.models.base import Base

if TYPE_CHECKING:
    from ai_tools.models.user import User

VOICE_MODEL_STATUSES: tuple[str, ...] = ("training", "ready", "failed")


class VoiceModel(Base):
    """A cloned voice trained from one of the user's recordings.

    Attributes:
        id: UUID primary key, auto-generated.
        user_id: Owner (foreign key to users).
        audio_recording_id: Source recording, if any.
        voice_name: Display name.
        description: Optional notes.
        status: One of training, ready, failed.
        fal_voice_id: Voice id assigned by the cloning vendor.
        training_progress: Percentage 0-100.
        is_active: Whether the voice can be used for generation.
    """

    __tablename__ = "voice_models"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    audio_recording_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("audio_recordings.id"), nullable=True
    )
    voice_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="training")
    fal_voice_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    training_progress: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0
    )
    is_active: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=True)
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )

    user: Mapped[User] = relationship("User", back_populates="voice_models")

    def __repr__(self) -> str:
        return f"<VoiceModel(id={self.id}, name='{self.voice_name}', status='{self.status}')>"
