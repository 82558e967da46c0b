"""SQLAlchemy ORM model for the audio_recordings table."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ai_tools.models.base import Base

if TYPE_CHECKING:
    from ai_tools.models.user import User

AUDIO_RECORDING_STATUSES: tuple[str, ...] = ("processing", "completed", "failed")


class AudioRecording(Base):
    """A voice sample uploaded by a user for cloning.

    Attributes:
        id: UUID primary key, auto-generated.
        user_id: Owner (foreign key to users).
        file_name: Stored file name (random, unique).
        original_name: File name supplied by the client.
        file_path: Absolute path of the stored file.
        file_size: Size in bytes.
        duration: Length in seconds.
        format: Container format, ``wav`` by default.
        sample_rate: Samples per second, when known.
        bit_rate: Bits per second, when known.
        channels: Channel count.
        status: One of processing, completed, failed.
        metadata_json: Free-form JSON text (column ``metadata``).
        created_at: Timestamp of record creation.
        updated_at: Timestamp of last update.
    """

    __tablename__ = "audio_recordings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    duration: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    format: Mapped[str] = mapped_column(String(50), nullable=False, default="wav")
    sample_rate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bit_rate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    channels: Mapped[int | None] = mapped_column(Integer, nullable=True, default=1)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default="processing"
    )
    # "metadata" is reserved on declarative classes.
    metadata_json: Mapped[str | None] = mapped_column("metadata", Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )

    user: Mapped[User] = relationship("User", back_populates="audio_recordings")

    def __repr__(self) -> str:
        return f"<AudioRecording(id={self.id}, status='{self.status}')>"
