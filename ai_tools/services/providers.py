"""Provider resolver and model handles.

Turns a :class:`~ai_tools.schemas.knowledge.ProviderSelection` into a
:class:`ModelHandle` bound to one remote model.  Handles know how to ask the
model for a JSON object in a single call (``generate_object``) or as a stream
of progressively more complete partial objects (``stream_object``).

API keys come from the selection or from the provider's environment
variable and are handed to the SDK client directly; ``os.environ`` is only
ever read.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

import anthropic
import openai
import pydantic
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from pydantic_core import from_json

from ai_tools.exceptions import GenerationError, ProviderError
from ai_tools.schemas.knowledge import ProviderSelection
from ai_tools.services.prompts import schema_instructions

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

PROVIDER_ENV_KEYS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "google": "GOOGLE_GENERATIVE_AI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "grok": "GROK_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
}

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "google": "gemini-1.5-flash",
    "anthropic": "claude-3-5-haiku-20241022",
    "grok": "grok-2-latest",
    "deepseek": "deepseek-chat",
}

# OpenAI-compatible endpoints served through the openai SDK.
_COMPATIBLE_BASE_URLS: dict[str, str] = {
    "grok": "https://api.x.ai/v1",
    "deepseek": "https://api.deepseek.com",
}

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?", flags=re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------


def strip_json_fences(raw_text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```), if any."""
    text = _FENCE_OPEN.sub("", raw_text.strip())
    text = _FENCE_CLOSE.sub("", text)
    return text.strip()


def parse_json_object(raw_text: str, model_id: str) -> dict[str, Any]:
    """Parse a complete model response into a JSON object.

    Raises:
        GenerationError: If the text is not JSON or not a JSON object.
    """
    text = strip_json_fences(raw_text)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("Unparseable response from %s (first 500 chars): %s", model_id, text[:500])
        raise GenerationError(f"Model response is not valid JSON: {exc}", model=model_id) from exc

    if not isinstance(data, dict):
        raise GenerationError(
            f"Expected a JSON object from the model, got {type(data).__name__}",
            model=model_id,
        )
    return data


def decode_partial(buffer: str) -> dict[str, Any] | None:
    """Decode the longest valid prefix of a streamed JSON object.

    Returns ``None`` while nothing object-shaped can be recovered yet.
    """
    text = _FENCE_OPEN.sub("", buffer.lstrip())
    if not text.strip():
        return None
    try:
        value = from_json(text, allow_partial=True)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


# ---------------------------------------------------------------------------
# Model handles
# ---------------------------------------------------------------------------


class ModelHandle(ABC):
    """A remote model ready to be called.

    Subclasses implement :meth:`complete` and :meth:`stream_text`; the
    JSON-object layer on top is shared.
    """

    def __init__(
        self,
        provider: str,
        model: str,
        api_key: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ) -> None:
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._api_key = api_key

    @property
    def model_id(self) -> str:
        return f"{self.provider}:{self.model}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.model_id!r})"

    @abstractmethod
    async def complete(
        self, prompt: str, system: str | None, schema: type[pydantic.BaseModel]
    ) -> str:
        """Return the full text of one completion."""

    @abstractmethod
    def stream_text(
        self, prompt: str, system: str | None, schema: type[pydantic.BaseModel]
    ) -> AsyncIterator[str]:
        """Yield text deltas of one streamed completion."""

    async def aclose(self) -> None:
        """Release the SDK client; the handle must not be used afterwards."""

    @staticmethod
    def _with_schema(prompt: str, schema: type[pydantic.BaseModel]) -> str:
        return f"{prompt}\n\n{schema_instructions(schema)}"

    async def generate_object(
        self,
        prompt: str,
        schema: type[pydantic.BaseModel],
        system: str | None = None,
    ) -> dict[str, Any]:
        """Ask for one JSON object matching *schema* and return it validated.

        The returned dict uses the schema's camelCase keys with every default
        filled in.

        Raises:
            GenerationError: On upstream failure or a non-conforming response.
        """
        logger.debug("generate_object via %s (schema=%s)", self.model_id, schema.__name__)
        raw_text = await self.complete(self._with_schema(prompt, schema), system, schema)
        if not raw_text:
            raise GenerationError("Model returned an empty response", model=self.model_id)

        data = parse_json_object(raw_text, self.model_id)
        try:
            validated = schema.model_validate(data)
        except pydantic.ValidationError as exc:
            raise GenerationError(
                f"Model response does not match {schema.__name__}: {exc.error_count()} error(s)",
                model=self.model_id,
            ) from exc
        return validated.model_dump(mode="json", by_alias=True)

    async def stream_object(
        self,
        prompt: str,
        schema: type[pydantic.BaseModel],
        system: str | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield partial objects as the model's JSON text grows.

        Each yielded dict is the best decoding of the text received so far;
        consecutive duplicates are suppressed.  Closing this iterator closes
        the upstream stream.
        """
        logger.debug("stream_object via %s (schema=%s)", self.model_id, schema.__name__)
        buffer = ""
        last: dict[str, Any] | None = None
        async with contextlib.aclosing(
            self.stream_text(self._with_schema(prompt, schema), system, schema)
        ) as deltas:
            async for delta in deltas:
                if not delta:
                    continue
                buffer += delta
                partial = decode_partial(buffer)
                if partial is not None and partial != last:
                    last = partial
                    yield partial


class OpenAIModel(ModelHandle):
    """OpenAI chat completions, also used for OpenAI-compatible endpoints."""

    def __init__(self, *args: Any, base_url: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._client = openai.AsyncOpenAI(api_key=self._api_key, base_url=base_url)

    def _messages(self, prompt: str, system: str | None) -> list[dict[str, str]]:
        messages = [{"role": "system", "content": system}] if system else []
        messages.append({"role": "user", "content": prompt})
        return messages

    def _response_format(self, schema: type[pydantic.BaseModel]) -> dict[str, Any]:
        if self.provider != "openai":
            return {"type": "json_object"}
        return {
            "type": "json_schema",
            "json_schema": {
                "name": schema.__name__,
                "schema": schema.model_json_schema(by_alias=True),
                "strict": False,
            },
        }

    def _wrap(self, exc: openai.APIError) -> GenerationError:
        if isinstance(exc, openai.APIStatusError):
            return GenerationError(
                f"{self.provider} API status error: {exc.status_code} {exc.message}",
                model=self.model_id,
            )
        return GenerationError(f"{self.provider} API error: {exc}", model=self.model_id)

    async def aclose(self):
        await self._client.close()

    async def complete(self, prompt, system, schema):
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=self._messages(prompt, system),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format=self._response_format(schema),
            )
        except openai.APIError as exc:
            raise self._wrap(exc) from exc
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def stream_text(self, prompt, system, schema):
        try:
            stream = await self._client.chat.completions.create(
                model=self.model,
                messages=self._messages(prompt, system),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format=self._response_format(schema),
                stream=True,
            )
            async with stream:
                async for chunk in stream:
                    if chunk.choices and chunk.choices[0].delta.content:
                        yield chunk.choices[0].delta.content
        except openai.APIError as exc:
            raise self._wrap(exc) from exc


class AnthropicModel(ModelHandle):
    """Anthropic messages API."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

    def _request(self, prompt: str, system: str | None) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request["system"] = system
        return request

    def _wrap(self, exc: anthropic.APIError) -> GenerationError:
        if isinstance(exc, anthropic.APIStatusError):
            return GenerationError(
                f"Claude API status error: {exc.status_code} {exc.message}",
                model=self.model_id,
            )
        return GenerationError(f"Claude API error: {exc}", model=self.model_id)

    async def aclose(self):
        await self._client.close()

    async def complete(self, prompt, system, schema):
        try:
            message = await self._client.messages.create(**self._request(prompt, system))
        except anthropic.APIError as exc:
            raise self._wrap(exc) from exc

        for block in message.content:
            if getattr(block, "text", None):
                return block.text
        return ""

    async def stream_text(self, prompt, system, schema):
        try:
            async with self._client.messages.stream(**self._request(prompt, system)) as stream:
                async for text in stream.text_stream:
                    yield text
        except anthropic.APIError as exc:
            raise self._wrap(exc) from exc


class GoogleModel(ModelHandle):
    """Gemini through the google-genai SDK."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._client = genai.Client(api_key=self._api_key)

    def _config(self, system: str | None) -> genai_types.GenerateContentConfig:
        return genai_types.GenerateContentConfig(
            system_instruction=system,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            response_mime_type="application/json",
        )

    def _wrap(self, exc: genai_errors.APIError) -> GenerationError:
        return GenerationError(f"Gemini API error: {exc.code} {exc.message}", model=self.model_id)

    async def aclose(self):
        await self._client.aio.aclose()

    async def complete(self, prompt, system, schema):
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model, contents=prompt, config=self._config(system)
            )
        except genai_errors.APIError as exc:
            raise self._wrap(exc) from exc
        return response.text or ""

    async def stream_text(self, prompt, system, schema):
        try:
            stream = await self._client.aio.models.generate_content_stream(
                model=self.model, contents=prompt, config=self._config(system)
            )
            async with contextlib.aclosing(stream) as chunks:
                async for chunk in chunks:
                    if chunk.text:
                        yield chunk.text
        except genai_errors.APIError as exc:
            raise self._wrap(exc) from exc


_HANDLE_CLASSES: dict[str, type[ModelHandle]] = {
    "openai": OpenAIModel,
    "grok": OpenAIModel,
    "deepseek": OpenAIModel,
    "anthropic": AnthropicModel,
    "google": GoogleModel,
}


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


def resolve_provider(selection: ProviderSelection) -> ModelHandle:
    """Build the model handle described by *selection*.

    The key is ``selection.api_key`` when given, otherwise the provider's
    environment variable (see :data:`PROVIDER_ENV_KEYS`).  The model falls
    back to :data:`DEFAULT_MODELS`.

    Raises:
        ProviderError: For an unregistered provider or when no key is found.
    """
    provider = selection.provider
    if provider not in PROVIDER_ENV_KEYS:
        raise ProviderError(
            provider,
            f"unsupported provider (expected one of: {', '.join(PROVIDER_ENV_KEYS)})",
        )

    env_key = PROVIDER_ENV_KEYS[provider]
    api_key = selection.api_key or os.getenv(env_key)
    if not api_key:
        raise ProviderError(provider, f"no API key supplied and {env_key} is not set")

    model = selection.model or DEFAULT_MODELS[provider]
    kwargs: dict[str, Any] = {}
    if provider in _COMPATIBLE_BASE_URLS:
        kwargs["base_url"] = _COMPATIBLE_BASE_URLS[provider]

    try:
        handle = _HANDLE_CLASSES[provider](
            provider,
            model,
            api_key,
            temperature=selection.temperature,
            max_tokens=selection.max_tokens,
            **kwargs,
        )
    except (ValueError, TypeError) as exc:
        raise ProviderError(provider, str(exc)) from exc

    logger.debug("Resolved %s", handle)
    return handle
