"""Infographic image generation with Gemini's native image model."""

from __future__ import annotations

import logging
import os

from google import genai
from google.genai import errors as genai_errors

from ai_tools.config import get_settings
from ai_tools.exceptions import GenerationError, ProviderError
from ai_tools.services.prompts import build_image_prompt

logger = logging.getLogger(__name__)

_ENV_KEY = "GOOGLE_GENERATIVE_AI_API_KEY"


def _image_api_key() -> str:
    api_key = get_settings().google_api_key or os.getenv(_ENV_KEY)
    if not api_key:
        raise ProviderError("google", f"no image API key configured (GOOGLE_API_KEY or {_ENV_KEY})")
    return api_key


async def generate_image(topic: str, style: str | None = None) -> bytes:
    """Render the five-panel infographic for *topic* and return PNG bytes.

    Raises:
        ProviderError: If no Google key is configured.
        GenerationError: If the call fails or the response holds no image.
    """
    model = get_settings().image_model
    client = genai.Client(api_key=_image_api_key())
    prompt = build_image_prompt(topic, style)

    logger.info("Generating image for %r with %s", topic, model)
    try:
        response = await client.aio.models.generate_content(model=model, contents=prompt)
    except genai_errors.APIError as exc:
        raise GenerationError(f"Gemini API error: {exc.code} {exc.message}", model=model) from exc
    finally:
        await client.aio.aclose()

    candidates = response.candidates or []
    parts = (candidates[0].content.parts if candidates and candidates[0].content else None) or []
    for part in parts:
        if part.text:
            logger.debug("Image model commentary: %s", part.text)
        elif part.inline_data and part.inline_data.data:
            return part.inline_data.data

    raise GenerationError("No image generated", model=model)
