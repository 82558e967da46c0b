"""Knowledge generation API routes.

Provides:
    POST /outline/generate    — Learning outline for a topic.
    POST /questions/generate  — Practice questions for a body of material.

Both accept ``stream`` in the body (or ``?stream=true``) to receive
newline-delimited partial objects instead of a single envelope.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Query

from ai_tools.api.dependencies import OutlineGeneratorDep, QuestionGeneratorDep
from ai_tools.api.envelopes import stream_response, success
from ai_tools.services.generator import BatchResult, StructuredGenerator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["knowledge"])


async def _run(generator: StructuredGenerator, payload: Any, stream: bool):
    result = await generator.generate(payload, stream=True if stream else None)
    if isinstance(result, BatchResult):
        return success(result.data)
    return stream_response(result)


@router.post("/outline/generate", summary="Generate a learning outline")
async def generate_outline(
    generator: OutlineGeneratorDep,
    payload: Any = Body(...),
    stream: bool = Query(default=False, description="Force a streamed response"),
):
    """Generate a structured outline (batch envelope or NDJSON stream).

    Raises:
        ValidationError: 400 when the body violates the request schema.
        ProviderError: 500 when the provider cannot be resolved.
        GenerationError: 500 when the model call fails (batch mode).
    """
    return await _run(generator, payload, stream)


@router.post("/questions/generate", summary="Generate practice questions")
async def generate_questions(
    generator: QuestionGeneratorDep,
    payload: Any = Body(...),
    stream: bool = Query(default=False, description="Force a streamed response"),
):
    return await _run(generator, payload, stream)
