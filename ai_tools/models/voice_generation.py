"""SQLAlchemy ORM model for the voice_generations table."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ai_tools.models.base import Base

if TYPE_CHECKING:
    from ai_tools.models.user import User

VOICE_GENERATION_STATUSES: tuple[str, ...] = ("processing", "completed", "failed")


class VoiceGeneration(Base):
    """Text rendered to speech with one of the user's voice models."""

    __tablename__ = "voice_generations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    voice_model_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("voice_models.id"), nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    audio_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default="processing"
    )
    fal_request_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )

    user: Mapped[User] = relationship("User", back_populates="voice_generations")

    def __repr__(self) -> str:
        return f"<VoiceGeneration(id={self.id}, status='{self.status}')>"
