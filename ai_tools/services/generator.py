"""Structured generation: validated request in, JSON object(s) out.

A generator validates its request, renders a prompt, resolves a model handle
and then either asks for one complete object (:class:`BatchResult`) or hands
back a lazy stream of merged partial objects (:class:`StreamResult`).
"""

from __future__ import annotations

import copy
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar

import pydantic

from ai_tools.config import get_settings
from ai_tools.exceptions import GenerationError
from ai_tools.schemas.knowledge import (
    Outline,
    OutlineRequest,
    ProviderSelection,
    QuestionRequest,
    QuestionsCollection,
    RequestModel,
)
from ai_tools.schemas.text_to_image import Principle, PrincipleRequest
from ai_tools.services.prompts import (
    build_outline_prompt,
    build_principle_prompt,
    build_question_prompt,
)
from ai_tools.services.providers import ModelHandle, resolve_provider
from ai_tools.services.request_validator import parse_request

logger = logging.getLogger(__name__)

Resolver = Callable[[ProviderSelection], ModelHandle]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BatchResult:
    """One complete, validated object."""

    data: dict[str, Any]
    model: str


@dataclass(frozen=True)
class StreamResult:
    """Lazy sequence of progressively more complete objects.

    Nothing is requested upstream until ``chunks`` is iterated.  Call
    :meth:`aclose` to stop early; it closes the upstream stream.
    """

    chunks: AsyncIterator[dict[str, Any]]
    model: str

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        return self.chunks

    async def aclose(self) -> None:
        aclose = getattr(self.chunks, "aclose", None)
        if aclose is not None:
            await aclose()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def merge_partial(accumulator: dict[str, Any], partial: dict[str, Any]) -> dict[str, Any]:
    """Fold *partial* into *accumulator* and return the merged copy.

    Nested objects merge key by key and scalars are overwritten.  Arrays are
    replaced as a whole, except that a shorter array never replaces a longer
    one, so already delivered items are not lost.
    """
    merged = dict(accumulator)
    for key, value in partial.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = merge_partial(current, value)
        elif isinstance(value, list) and isinstance(current, list) and len(value) < len(current):
            continue
        else:
            merged[key] = value
    return merged


async def collect(result: BatchResult | StreamResult) -> dict[str, Any]:
    """Return the final object of *result*, draining it if it is a stream."""
    if isinstance(result, BatchResult):
        return result.data

    final: dict[str, Any] = {}
    async for chunk in result:
        final = chunk
    return final


# ---------------------------------------------------------------------------
# Skeleton
# ---------------------------------------------------------------------------


class StructuredGenerator:
    """Shared request → prompt → model → object pipeline.

    Subclasses set the two schemas and implement :meth:`build_prompt`; they
    may override :meth:`provider_selection` and :meth:`build_metadata`.
    """

    request_schema: ClassVar[type[RequestModel]]
    result_schema: ClassVar[type[pydantic.BaseModel]]

    def __init__(self, resolver: Resolver = resolve_provider) -> None:
        self._resolve = resolver

    # -- hooks ---------------------------------------------------------------

    def build_prompt(self, request: Any) -> tuple[str | None, str]:
        """Return ``(system, prompt)`` for *request*."""
        raise NotImplementedError

    def provider_selection(self, request: Any) -> ProviderSelection:
        return request.provider_config

    def build_metadata(
        self, request: Any, data: dict[str, Any], model_id: str
    ) -> dict[str, Any] | None:
        """Return the metadata block to stamp on *data*, or ``None`` for none."""
        return None

    # -- pipeline ------------------------------------------------------------

    async def generate(
        self, payload: Any, *, stream: bool | None = None
    ) -> BatchResult | StreamResult:
        """Run the generator on *payload*.

        Args:
            payload: Raw request body or an already validated request.
            stream: Overrides the request's ``stream`` flag when not ``None``.

        Raises:
            ValidationError: Before any provider work, if *payload* is invalid.
            ProviderError: If no model handle can be built.
            GenerationError: Batch mode only; stream errors surface while
                iterating.
        """
        request = parse_request(self.request_schema, payload)
        system, prompt = self.build_prompt(request)
        handle = self._resolve(self.provider_selection(request))
        use_stream = request.stream if stream is None else stream

        logger.info(
            "%s: %s via %s",
            type(self).__name__,
            "streaming" if use_stream else "batch",
            handle.model_id,
        )

        if use_stream:
            return StreamResult(
                chunks=self._stream(request, handle, prompt, system),
                model=handle.model_id,
            )
        try:
            data = await self._batch(request, handle, prompt, system)
        finally:
            await handle.aclose()
        return BatchResult(data=data, model=handle.model_id)

    def _stamp(self, request: Any, data: dict[str, Any], model_id: str) -> dict[str, Any]:
        metadata = self.build_metadata(request, data, model_id)
        if metadata is not None:
            existing = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
            data["metadata"] = {**existing, **metadata}
        return data

    def _validate(self, data: dict[str, Any], model_id: str) -> pydantic.BaseModel:
        try:
            return self.result_schema.model_validate(data)
        except pydantic.ValidationError as exc:
            raise GenerationError(
                f"Generated object does not match {self.result_schema.__name__}",
                model=model_id,
            ) from exc

    async def _batch(
        self, request: Any, handle: ModelHandle, prompt: str, system: str | None
    ) -> dict[str, Any]:
        data = await handle.generate_object(prompt, self.result_schema, system=system)
        self._stamp(request, data, handle.model_id)
        return self._validate(data, handle.model_id).model_dump(mode="json", by_alias=True)

    async def _stream(
        self, request: Any, handle: ModelHandle, prompt: str, system: str | None
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield merged partials, then check the finished object.

        Raises:
            GenerationError: After the upstream stream ends, if it produced no
                JSON object or the final object does not match the result
                schema.
        """
        accumulator: dict[str, Any] = {}
        received = False
        partials = handle.stream_object(prompt, self.result_schema, system=system)
        try:
            async for partial in partials:
                received = True
                accumulator = merge_partial(accumulator, partial)
                self._stamp(request, accumulator, handle.model_id)
                yield copy.deepcopy(accumulator)
        finally:
            try:
                await partials.aclose()
            finally:
                await handle.aclose()

        if not received:
            raise GenerationError("Model returned no JSON object", model=handle.model_id)
        self._validate(accumulator, handle.model_id)


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


class OutlineGenerator(StructuredGenerator):
    """Learning outlines for ``POST /outline/generate``."""

    request_schema = OutlineRequest
    result_schema = Outline

    def build_prompt(self, request: OutlineRequest) -> tuple[str | None, str]:
        return None, build_outline_prompt(request)

    def build_metadata(self, request, data, model_id):
        structure = data.get("structure")
        previous = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        return {
            "totalTopics": len(structure) if isinstance(structure, list) else 0,
            "estimatedTotalTime": previous.get("estimatedTotalTime") or request.estimated_duration,
            "generatedAt": utc_now_iso(),
            "model": model_id,
        }


class QuestionGenerator(StructuredGenerator):
    """Quiz questions for ``POST /questions/generate``."""

    request_schema = QuestionRequest
    result_schema = QuestionsCollection

    def build_prompt(self, request: QuestionRequest) -> tuple[str | None, str]:
        return None, build_question_prompt(request)

    def build_metadata(self, request, data, model_id):
        questions = data.get("questions")
        questions = questions if isinstance(questions, list) else []
        seen_types = [
            q["type"] for q in questions if isinstance(q, dict) and isinstance(q.get("type"), str)
        ]
        return {
            "totalQuestions": len(questions),
            "questionTypes": list(dict.fromkeys(seen_types)) or list(request.question_types),
            "difficulty": request.difficulty,
            "outlineId": request.outline_id,
            "generatedAt": utc_now_iso(),
            "model": model_id,
        }

    async def _batch(self, request, handle, prompt, system):
        data = await super()._batch(request, handle, prompt, system)
        received = len(data["questions"])
        if received > request.count:
            logger.warning(
                "Asked %s for %d questions, got %d; keeping the first %d",
                handle.model_id,
                request.count,
                received,
                request.count,
            )
            data["questions"] = data["questions"][: request.count]
            self._stamp(request, data, handle.model_id)
        elif received < request.count:
            logger.warning(
                "Asked %s for %d questions, got %d", handle.model_id, request.count, received
            )
        return data


class PrincipleGenerator(StructuredGenerator):
    """Five-panel cause/effect breakdowns for the text-to-image flow.

    The model is configured server side (``PRINCIPLE_PROVIDER`` and friends)
    rather than per request.
    """

    request_schema = PrincipleRequest
    result_schema = Principle

    def build_prompt(self, request: PrincipleRequest) -> tuple[str | None, str]:
        return build_principle_prompt(request.topic)

    def provider_selection(self, request: PrincipleRequest) -> ProviderSelection:
        settings = get_settings()
        return ProviderSelection(
            provider=settings.principle_provider,
            model=settings.principle_model,
            temperature=settings.principle_temperature,
        )
