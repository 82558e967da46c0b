"""Pydantic v2 schemas for the outline and question generators.

JSON payloads use camelCase keys (``providerConfig``, ``questionTypes``);
Python code uses the snake_case attribute names.  Both spellings are accepted
on input.
"""

from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class QuestionType(str, Enum):
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    FILL = "fill"
    ESSAY = "essay"
    MIXED = "mixed"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    MIXED = "mixed"


class Language(str, Enum):
    ZH = "zh"
    EN = "en"


class OutlineLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


def _new_id() -> str:
    return uuid.uuid4().hex


class CamelModel(BaseModel):
    """Base for payload models serialised with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )


class RequestModel(CamelModel):
    """Base for validated requests: immutable once parsed."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


class ProviderSelection(RequestModel):
    """Which remote model to call, and how.

    Attributes:
        provider: Registered provider name; checked by the provider resolver
            so an unknown name surfaces as a ``ProviderError``.
        model: Model name; ``None`` selects the provider's default model.
        api_key: Explicit key; ``None`` falls back to the provider's
            environment variable.
        temperature: Sampling temperature.
        max_tokens: Upper bound on generated tokens.
    """

    provider: str = Field(default="openai", min_length=1)
    model: str | None = Field(default=None, min_length=1)
    api_key: str | None = Field(default=None, repr=False)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, gt=0)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class OutlineRequest(RequestModel):
    """Request payload for POST /outline/generate."""

    content: str = Field(..., min_length=1, description="Topic to build an outline for")
    stream: bool = False
    target_audience: str = "初学者"
    difficulty_level: OutlineLevel = OutlineLevel.INTERMEDIATE
    estimated_duration: str = "2小时"
    depth: int = Field(default=8, ge=1, le=10, description="Number of main topics")
    language: Language = Language.ZH
    include_examples: bool = True
    provider_config: ProviderSelection = Field(default_factory=ProviderSelection)


class QuestionRequest(RequestModel):
    """Request payload for POST /questions/generate."""

    content: str = Field(..., min_length=1, description="Material to write questions about")
    stream: bool = False
    question_types: list[QuestionType] = Field(
        default_factory=lambda: [QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE],
        min_length=1,
    )
    count: int = Field(default=5, ge=1, le=50)
    difficulty: Difficulty = Difficulty.MIXED
    language: Language = Language.ZH
    outline_id: str = ""
    provider_config: ProviderSelection = Field(default_factory=ProviderSelection)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class OutlineTopic(CamelModel):
    id: str = Field(default_factory=_new_id)
    title: str = Field(..., min_length=1)
    description: str = ""
    key_points: list[str] = Field(default_factory=list)
    estimated_time: str = ""


class OutlineMetadata(CamelModel):
    total_topics: int = 0
    estimated_total_time: str = ""
    generated_at: str = ""
    model: str = ""


class Outline(CamelModel):
    """A structured learning plan: topic plus ordered sub-topics."""

    id: str = Field(default_factory=_new_id)
    topic: str
    level: OutlineLevel = OutlineLevel.INTERMEDIATE
    structure: list[OutlineTopic] = Field(..., min_length=1)
    metadata: OutlineMetadata = Field(default_factory=OutlineMetadata)


_CHOICE_TYPES = (QuestionType.SINGLE_CHOICE.value, QuestionType.MULTIPLE_CHOICE.value)


class QuestionOption(CamelModel):
    id: str
    text: str
    is_correct: bool


class Question(CamelModel):
    id: str = Field(default_factory=_new_id)
    type: QuestionType
    title: str = Field(..., min_length=1)
    options: list[QuestionOption] | None = None
    answer: str | None = None
    explanation: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _choice_questions_need_options(self) -> Question:
        if self.type in _CHOICE_TYPES and len(self.options or []) < 2:
            raise ValueError(f"{self.type} questions need at least 2 options")
        return self


class QuestionsMetadata(CamelModel):
    total_questions: int = 0
    question_types: list[QuestionType] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.MIXED
    outline_id: str = ""
    generated_at: str = ""
    model: str = ""


class QuestionsCollection(CamelModel):
    """A set of generated quiz questions."""

    id: str = Field(default_factory=_new_id)
    questions: list[Question] = Field(..., min_length=1)
    metadata: QuestionsMetadata = Field(default_factory=QuestionsMetadata)
