"""Initial schema — users, audio recordings, voice models and generations.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2024-05-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def upgrade() -> None:
    # gen_random_uuid() lives in pgcrypto before PostgreSQL 13
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # -- users --
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    # -- audio_recordings --
    op.create_table(
        "audio_recordings",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("original_name", sa.String(255), nullable=True),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("duration", sa.Numeric(10, 2), nullable=True),
        sa.Column("format", sa.String(50), server_default="wav", nullable=False),
        sa.Column("sample_rate", sa.Integer(), nullable=True),
        sa.Column("bit_rate", sa.Integer(), nullable=True),
        sa.Column("channels", sa.Integer(), server_default="1", nullable=True),
        sa.Column("status", sa.String(50), server_default="processing", nullable=False),
        sa.Column("metadata", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('processing', 'completed', 'failed')",
            name="ck_audio_recordings_status",
        ),
    )
    op.create_index("ix_audio_recordings_user_id", "audio_recordings", ["user_id"])

    # -- voice_models --
    op.create_table(
        "voice_models",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("audio_recording_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("voice_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(50), server_default="training", nullable=False),
        sa.Column("fal_voice_id", sa.String(255), nullable=True),
        sa.Column("training_progress", sa.Integer(), server_default="0", nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["audio_recording_id"], ["audio_recordings.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('training', 'ready', 'failed')", name="ck_voice_models_status"
        ),
        sa.CheckConstraint(
            "training_progress BETWEEN 0 AND 100", name="ck_voice_models_progress"
        ),
    )
    op.create_index("ix_voice_models_user_id", "voice_models", ["user_id"])

    # -- voice_generations --
    op.create_table(
        "voice_generations",
        _uuid_pk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("voice_model_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("audio_url", sa.Text(), nullable=True),
        sa.Column("duration", sa.Numeric(10, 2), nullable=True),
        sa.Column("status", sa.String(50), server_default="processing", nullable=False),
        sa.Column("fal_request_id", sa.String(255), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["voice_model_id"], ["voice_models.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('processing', 'completed', 'failed')",
            name="ck_voice_generations_status",
        ),
    )
    op.create_index("ix_voice_generations_user_id", "voice_generations", ["user_id"])


def downgrade() -> None:
    op.drop_table("voice_generations")
    op.drop_table("voice_models")
    op.drop_table("audio_recordings")
    op.drop_table("users")
