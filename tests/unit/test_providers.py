"""Unit tests for the provider resolver and model handles.

Tests cover:
1. resolve_provider — registry lookup, key precedence, defaults, failures
2. JSON helpers — fence stripping, object parsing, partial decoding
3. generate_object / stream_object — via the scripted FakeModel
4. SDK adapters — request shape and error wrapping with mocked clients

No real provider API calls are made; every client call is mocked.
"""

from __future__ import annotations

import json
import os
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import openai
import pytest

from ai_tools.exceptions import GenerationError, ProviderError
from ai_tools.schemas.knowledge import Outline, ProviderSelection
from ai_tools.services.providers import (
    DEFAULT_MODELS,
    PROVIDER_ENV_KEYS,
    AnthropicModel,
    GoogleModel,
    OpenAIModel,
    decode_partial,
    parse_json_object,
    resolve_provider,
    strip_json_fences,
)
from tests.fixtures.fake_models import FakeModel
from tests.fixtures.sample_payloads import VALID_OUTLINE, as_json, chunked


@pytest.fixture(autouse=True)
def _clear_provider_env(monkeypatch):
    for env_key in PROVIDER_ENV_KEYS.values():
        monkeypatch.delenv(env_key, raising=False)


# ---------------------------------------------------------------------------
# Test group 1: resolve_provider
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "provider, handle_class",
    [
        ("openai", OpenAIModel),
        ("grok", OpenAIModel),
        ("deepseek", OpenAIModel),
        ("anthropic", AnthropicModel),
        ("google", GoogleModel),
    ],
)
def test_resolve_provider_builds_the_right_handle(provider, handle_class):
    handle = resolve_provider(ProviderSelection(provider=provider, api_key="k-123"))

    assert isinstance(handle, handle_class)
    assert handle.model == DEFAULT_MODELS[provider]
    assert handle.model_id == f"{provider}:{DEFAULT_MODELS[provider]}"


def test_resolve_provider_reads_designated_env_var(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")

    handle = resolve_provider(ProviderSelection(provider="anthropic"))

    assert handle._api_key == "env-key"


def test_explicit_key_wins_over_env_var(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "env-key")

    handle = resolve_provider(ProviderSelection(provider="openai", api_key="explicit"))

    assert handle._api_key == "explicit"


def test_resolve_provider_does_not_write_environment(monkeypatch):
    resolve_provider(ProviderSelection(provider="google", api_key="explicit"))

    assert "GOOGLE_GENERATIVE_AI_API_KEY" not in os.environ


def test_explicit_model_and_sampling_settings_are_kept():
    handle = resolve_provider(
        ProviderSelection(
            provider="openai", model="gpt-4o", api_key="k", temperature=0.1, max_tokens=321
        )
    )

    assert handle.model_id == "openai:gpt-4o"
    assert handle.temperature == 0.1
    assert handle.max_tokens == 321


def test_compatible_providers_use_their_base_url():
    grok = resolve_provider(ProviderSelection(provider="grok", api_key="k"))
    deepseek = resolve_provider(ProviderSelection(provider="deepseek", api_key="k"))

    assert str(grok._client.base_url).startswith("https://api.x.ai/v1")
    assert str(deepseek._client.base_url).startswith("https://api.deepseek.com")


def test_unknown_provider_raises_provider_error():
    with pytest.raises(ProviderError) as exc_info:
        resolve_provider(ProviderSelection(provider="mistral", api_key="k"))

    assert exc_info.value.provider == "mistral"
    assert str(exc_info.value).startswith("Failed to create mistral model:")


def test_missing_key_raises_provider_error_naming_env_var():
    with pytest.raises(ProviderError) as exc_info:
        resolve_provider(ProviderSelection(provider="deepseek"))

    assert "DEEPSEEK_API_KEY" in exc_info.value.reason


# ---------------------------------------------------------------------------
# Test group 2: JSON helpers
# ---------------------------------------------------------------------------


def test_strip_json_fences_removes_markdown_wrapper():
    assert strip_json_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_json_fences('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_json_fences('  {"a": 1}  ') == '{"a": 1}'


def test_parse_json_object_rejects_invalid_json():
    with pytest.raises(GenerationError) as exc_info:
        parse_json_object("not json at all", "openai:m")

    assert exc_info.value.model == "openai:m"


def test_parse_json_object_rejects_non_objects():
    with pytest.raises(GenerationError, match="JSON object"):
        parse_json_object("[1, 2, 3]", "openai:m")


def test_decode_partial_drops_incomplete_trailing_string():
    assert decode_partial('{"topic": "Photo", "level": "beg') == {"topic": "Photo"}


def test_decode_partial_handles_leading_fence():
    assert decode_partial('```json\n{"a": "x", "b": "y') == {"a": "x"}


@pytest.mark.parametrize("buffer", ["", "   ", "```json\n", '["a", "b'])
def test_decode_partial_returns_none_without_an_object(buffer):
    assert decode_partial(buffer) is None


# ---------------------------------------------------------------------------
# Test group 3: generate_object / stream_object
# ---------------------------------------------------------------------------


async def test_generate_object_returns_validated_camel_case_dict():
    model = FakeModel(text="```json\n" + as_json(VALID_OUTLINE) + "\n```")

    data = await model.generate_object("prompt", Outline)

    assert data["topic"] == "Photosynthesis"
    assert data["structure"][0]["keyPoints"] == ["Sunlight", "Water from roots", "CO2 from air"]
    assert data["metadata"]["estimatedTotalTime"] == "1 hour"


async def test_generate_object_appends_schema_instructions_to_prompt():
    model = FakeModel(text=as_json(VALID_OUTLINE))

    await model.generate_object("Make an outline", Outline, system="sys")

    system, prompt = model.prompts[0]
    assert system == "sys"
    assert prompt.startswith("Make an outline")
    assert "JSON schema" in prompt


async def test_generate_object_rejects_schema_mismatch():
    model = FakeModel(text=json.dumps({"topic": "x", "structure": []}))

    with pytest.raises(GenerationError, match="does not match Outline"):
        await model.generate_object("p", Outline)


async def test_generate_object_rejects_empty_response():
    with pytest.raises(GenerationError, match="empty"):
        await FakeModel(text="").generate_object("p", Outline)


async def test_stream_object_yields_growing_distinct_partials():
    model = FakeModel(deltas=chunked(as_json(VALID_OUTLINE)))

    partials = [p async for p in model.stream_object("p", Outline)]

    assert partials, "At least one partial must be produced"
    assert partials[-1] == VALID_OUTLINE
    for previous, current in zip(partials, partials[1:]):
        assert previous != current, "Consecutive duplicates must be suppressed"


async def test_stream_object_closes_upstream_when_consumer_stops():
    model = FakeModel(deltas=chunked(as_json(VALID_OUTLINE), size=5))
    stream = model.stream_object("p", Outline)

    await stream.__anext__()
    await stream.aclose()

    assert model.stream_closed
    assert model.deltas_sent < len(model.deltas)


async def test_stream_object_propagates_mid_stream_failure():
    model = FakeModel(deltas=chunked(as_json(VALID_OUTLINE), size=10), fail_after=6)
    received = []

    with pytest.raises(GenerationError, match="upstream stream broke"):
        async for partial in model.stream_object("p", Outline):
            received.append(partial)

    assert received, "Partials before the failure must still be delivered"


# ---------------------------------------------------------------------------
# Test group 4: SDK adapters
# ---------------------------------------------------------------------------


def _openai_response(content: str) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


async def test_openai_model_requests_json_schema_format():
    handle = OpenAIModel("openai", "gpt-4o-mini", "k")
    handle._client = MagicMock()
    handle._client.chat.completions.create = AsyncMock(
        return_value=_openai_response(as_json(VALID_OUTLINE))
    )

    data = await handle.generate_object("p", Outline, system="be brief")

    kwargs = handle._client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"]["type"] == "json_schema"
    assert kwargs["response_format"]["json_schema"]["name"] == "Outline"
    assert kwargs["messages"][0] == {"role": "system", "content": "be brief"}
    assert data["id"] == "outline-photosynthesis"


async def test_compatible_endpoint_uses_json_object_mode():
    handle = OpenAIModel("deepseek", "deepseek-chat", "k", base_url="https://api.deepseek.com")
    handle._client = MagicMock()
    handle._client.chat.completions.create = AsyncMock(
        return_value=_openai_response(as_json(VALID_OUTLINE))
    )

    await handle.generate_object("p", Outline)

    kwargs = handle._client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"][0]["role"] == "user"


async def test_openai_connection_error_becomes_generation_error():
    handle = OpenAIModel("openai", "gpt-4o-mini", "k")
    handle._client = MagicMock()
    handle._client.chat.completions.create = AsyncMock(
        side_effect=openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))
    )

    with pytest.raises(GenerationError) as exc_info:
        await handle.generate_object("p", Outline)

    assert exc_info.value.model == "openai:gpt-4o-mini"


async def test_anthropic_model_passes_system_and_reads_text_block():
    handle = AnthropicModel("anthropic", "claude-3-5-haiku-20241022", "k", max_tokens=500)
    message = MagicMock()
    message.content = [MagicMock(text=as_json(VALID_OUTLINE))]
    handle._client = MagicMock()
    handle._client.messages.create = AsyncMock(return_value=message)

    data = await handle.generate_object("p", Outline, system="sys")

    kwargs = handle._client.messages.create.call_args.kwargs
    assert kwargs["system"] == "sys"
    assert kwargs["max_tokens"] == 500
    assert data["topic"] == "Photosynthesis"


async def test_anthropic_connection_error_becomes_generation_error():
    handle = AnthropicModel("anthropic", "claude-3-5-haiku-20241022", "k")
    handle._client = MagicMock()
    handle._client.messages.create = AsyncMock(
        side_effect=anthropic.APIConnectionError(
            request=httpx.Request("POST", "https://api.anthropic.com")
        )
    )

    with pytest.raises(GenerationError, match="Claude API error"):
        await handle.generate_object("p", Outline)


async def test_google_model_requests_json_mime_type():
    handle = GoogleModel("google", "gemini-1.5-flash", "k")
    response = MagicMock()
    response.text = as_json(VALID_OUTLINE)
    handle._client = MagicMock()
    handle._client.aio.models.generate_content = AsyncMock(return_value=response)

    data = await handle.generate_object("p", Outline, system="sys")

    kwargs = handle._client.aio.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-1.5-flash"
    assert kwargs["config"].response_mime_type == "application/json"
    assert kwargs["config"].system_instruction == "sys"
    assert data["topic"] == "Photosynthesis"


@pytest.mark.parametrize(
    ("handle_cls", "provider", "close_path"),
    [
        (OpenAIModel, "openai", ("close",)),
        (AnthropicModel, "anthropic", ("close",)),
        (GoogleModel, "google", ("aio", "aclose")),
    ],
)
async def test_aclose_releases_the_sdk_client(handle_cls, provider, close_path):
    handle = handle_cls(provider, "some-model", "k")
    handle._client = MagicMock()
    close = AsyncMock()
    owner = handle._client
    for name in close_path[:-1]:
        owner = getattr(owner, name)
    setattr(owner, close_path[-1], close)

    await handle.aclose()

    close.assert_awaited_once()
