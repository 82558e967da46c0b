"""Pydantic v2 schemas for the text-to-image endpoints."""

from __future__ import annotations

from pydantic import Field

from ai_tools.schemas.knowledge import CamelModel, RequestModel


class PrincipleRequest(RequestModel):
    """Request payload for POST /text-to-image/principle (and /principle/stream)."""

    topic: str = Field(..., min_length=1, description="Phenomenon to explain")
    stream: bool = False


class GenerateImageRequest(RequestModel):
    """Request payload for POST /text-to-image/generate."""

    topic: str = Field(..., min_length=1, description="Topic to illustrate")
    style: str | None = Field(default=None, description="Style hint appended to the prompt")


class Principle(CamelModel):
    """Cause-and-effect breakdown of a topic for a five-panel infographic."""

    topic: str
    summary: str = Field(..., min_length=10)
    mechanism: list[str] = Field(..., min_length=1)
    cause: list[str] = Field(..., min_length=1)
    effects: list[str] = Field(..., min_length=1)
    consequence: list[str] = Field(..., min_length=1)
    analogies: list[str] | None = None
    classroom_safe: bool = True
