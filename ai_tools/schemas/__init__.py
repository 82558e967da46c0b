"""Pydantic v2 request/response schemas for the AI Tools API."""

from ai_tools.schemas.common import (
    ErrorEnvelope,
    HealthResponse,
    SuccessEnvelope,
)
from ai_tools.schemas.knowledge import (
    Difficulty,
    Language,
    Outline,
    OutlineLevel,
    OutlineRequest,
    OutlineTopic,
    ProviderSelection,
    Question,
    QuestionOption,
    QuestionRequest,
    QuestionsCollection,
    QuestionType,
)
from ai_tools.schemas.text_to_image import GenerateImageRequest, Principle, PrincipleRequest

__all__ = [
    "QuestionType",
    "Difficulty",
    "Language",
    "OutlineLevel",
    "ProviderSelection",
    "OutlineRequest",
    "QuestionRequest",
    "OutlineTopic",
    "Outline",
    "QuestionOption",
    "Question",
    "QuestionsCollection",
    "PrincipleRequest",
    "GenerateImageRequest",
    "Principle",
    "SuccessEnvelope",
    "ErrorEnvelope",
    "HealthResponse",
]
