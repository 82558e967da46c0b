"""Text-to-image API routes.

Provides:
    POST /text-to-image/principle         — Cause/effect breakdown of a topic.
    POST /text-to-image/principle/stream  — Same, as NDJSON partials.
    POST /text-to-image/generate          — Five-panel infographic PNG.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import Response

from ai_tools.api.dependencies import PrincipleGeneratorDep
from ai_tools.api.envelopes import stream_response, success
from ai_tools.request_context import get_request_id
from ai_tools.schemas.text_to_image import GenerateImageRequest
from ai_tools.services.generator import collect
from ai_tools.services.images import generate_image
from ai_tools.services.request_validator import parse_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/text-to-image", tags=["text-to-image"])


@router.post("/principle", summary="Explain the principle behind a topic")
async def principle(generator: PrincipleGeneratorDep, payload: Any = Body(...)):
    result = await generator.generate(payload, stream=False)
    return success(await collect(result))


@router.post("/principle/stream", summary="Stream the principle behind a topic")
async def principle_stream(generator: PrincipleGeneratorDep, payload: Any = Body(...)):
    result = await generator.generate(payload, stream=True)
    return stream_response(result)


@router.post("/generate", summary="Render an infographic", response_class=Response)
async def generate(payload: Any = Body(...)) -> Response:
    """Return the infographic as ``image/png``.

    Raises:
        ValidationError: 400 for a missing or empty topic.
        GenerationError: 500 when the model returns no image.
    """
    request = parse_request(GenerateImageRequest, payload)
    image = await generate_image(request.topic, request.style)
    logger.info("Generated %d byte image for %r", len(image), request.topic)
    return Response(
        content=image,
        media_type="image/png",
        headers={"X-Request-ID": get_request_id()},
    )
