"""Unit tests for infographic generation (ai_tools/services/images.py)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ai_tools.config import Settings
from ai_tools.exceptions import GenerationError, ProviderError
from ai_tools.services import images


def _response(*parts) -> MagicMock:
    response = MagicMock()
    response.candidates = [MagicMock()]
    response.candidates[0].content.parts = list(parts)
    return response


def _text_part(text: str) -> MagicMock:
    part = MagicMock()
    part.text = text
    part.inline_data = None
    return part


def _image_part(data: bytes) -> MagicMock:
    part = MagicMock()
    part.text = None
    part.inline_data.data = data
    return part


@pytest.fixture
def image_settings():
    settings = Settings(google_api_key="g-key", image_model="image-model-x")
    with patch.object(images, "get_settings", return_value=settings):
        yield settings


def _client_returning(response) -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response)
    client.aio.aclose = AsyncMock()
    return client


async def test_returns_first_inline_image(image_settings):
    client = _client_returning(_response(_text_part("Here you go"), _image_part(b"PNG")))

    with patch.object(images.genai, "Client", return_value=client) as client_cls:
        data = await images.generate_image("Tides", "watercolour")

    assert data == b"PNG"
    client_cls.assert_called_once_with(api_key="g-key")
    kwargs = client.aio.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "image-model-x"
    assert "WHY TIDES?" in kwargs["contents"]
    assert kwargs["contents"].endswith("Style note: watercolour")
    client.aio.aclose.assert_awaited_once()


async def test_text_only_response_is_a_generation_error(image_settings):
    client = _client_returning(_response(_text_part("I can only describe it.")))

    with patch.object(images.genai, "Client", return_value=client):
        with pytest.raises(GenerationError, match="No image generated"):
            await images.generate_image("Tides")


async def test_empty_candidates_is_a_generation_error(image_settings):
    response = MagicMock()
    response.candidates = []

    with patch.object(images.genai, "Client", return_value=_client_returning(response)):
        with pytest.raises(GenerationError):
            await images.generate_image("Tides")


async def test_env_key_is_used_when_setting_is_empty(monkeypatch):
    monkeypatch.setenv("GOOGLE_GENERATIVE_AI_API_KEY", "env-key")
    client = _client_returning(_response(_image_part(b"PNG")))

    with patch.object(images, "get_settings", return_value=Settings(google_api_key="")):
        with patch.object(images.genai, "Client", return_value=client) as client_cls:
            await images.generate_image("Tides")

    client_cls.assert_called_once_with(api_key="env-key")


async def test_missing_key_is_a_provider_error(monkeypatch):
    monkeypatch.delenv("GOOGLE_GENERATIVE_AI_API_KEY", raising=False)

    with patch.object(images, "get_settings", return_value=Settings(google_api_key="")):
        with pytest.raises(ProviderError) as exc_info:
            await images.generate_image("Tides")

    assert exc_info.value.provider == "google"


async def test_client_is_closed_when_the_call_fails(image_settings):
    client = _client_returning(None)
    client.aio.models.generate_content.side_effect = images.genai_errors.APIError(
        500, {"error": {"message": "backend unavailable"}}
    )

    with patch.object(images.genai, "Client", return_value=client):
        with pytest.raises(GenerationError, match="Gemini API error"):
            await images.generate_image("Tides")

    client.aio.aclose.assert_awaited_once()
