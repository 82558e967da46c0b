"""Integration tests for the text-to-image endpoints.

Endpoints tested
----------------
POST /text-to-image/principle         — principle breakdown envelope
POST /text-to-image/principle/stream  — principle breakdown as NDJSON
POST /text-to-image/generate          — infographic PNG bytes

The image call is patched at ``ai_tools.api.text_to_image.generate_image``.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

from ai_tools.exceptions import GenerationError, ProviderError
from tests.fixtures.sample_payloads import VALID_PRINCIPLE, as_json, chunked

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


# ---------------------------------------------------------------------------
# Principle
# ---------------------------------------------------------------------------


def test_principle_returns_envelope(test_client, fake_model):
    fake_model.text = as_json(VALID_PRINCIPLE)

    response = test_client.post("/text-to-image/principle", json={"topic": "Rainbows"})

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["topic"] == "Rainbows"
    assert data["classroomSafe"] is True
    assert fake_model.prompts[0][1].startswith("Topic: Rainbows")


def test_principle_ignores_stream_flag(test_client, fake_model):
    fake_model.text = as_json(VALID_PRINCIPLE)

    response = test_client.post(
        "/text-to-image/principle", json={"topic": "Rainbows", "stream": True}
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")


def test_principle_requires_topic(test_client):
    response = test_client.post("/text-to-image/principle", json={})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "topic"


def test_principle_stream_emits_ndjson(test_client, fake_model):
    fake_model.deltas = chunked(as_json(VALID_PRINCIPLE))

    response = test_client.post("/text-to-image/principle/stream", json={"topic": "Rainbows"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    lines = [json.loads(line) for line in response.text.splitlines() if line.strip()]
    assert lines[-1]["summary"] == VALID_PRINCIPLE["summary"]
    assert lines[-1]["consequence"] == VALID_PRINCIPLE["consequence"]


# ---------------------------------------------------------------------------
# Image generation
# ---------------------------------------------------------------------------


def test_generate_returns_png_bytes(test_client):
    with patch(
        "ai_tools.api.text_to_image.generate_image", AsyncMock(return_value=PNG_BYTES)
    ) as mock_generate:
        response = test_client.post(
            "/text-to-image/generate", json={"topic": "Tides", "style": "watercolour"}
        )

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content == PNG_BYTES
    assert response.headers["X-Request-ID"]
    mock_generate.assert_awaited_once_with("Tides", "watercolour")


def test_generate_without_topic_is_400(test_client):
    with patch("ai_tools.api.text_to_image.generate_image", AsyncMock()) as mock_generate:
        response = test_client.post("/text-to-image/generate", json={"topic": ""})

    assert response.status_code == 400
    mock_generate.assert_not_awaited()


def test_generate_without_image_is_500(test_client):
    with patch(
        "ai_tools.api.text_to_image.generate_image",
        AsyncMock(side_effect=GenerationError("No image generated", model="gemini-image")),
    ):
        response = test_client.post("/text-to-image/generate", json={"topic": "Tides"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "generation_failed"
    assert body["message"] == "No image generated"


def test_generate_without_google_key_is_provider_error(test_client):
    with patch(
        "ai_tools.api.text_to_image.generate_image",
        AsyncMock(side_effect=ProviderError("google", "no image API key configured")),
    ):
        response = test_client.post("/text-to-image/generate", json={"topic": "Tides"})

    assert response.status_code == 500
    assert response.json()["provider"] == "google"
