"""Unit tests for custom exception classes (ai_tools/exceptions.py).

Tests verify that each exception class:
1. Stores its constructor arguments as instance attributes.
2. Inherits from the standard Exception hierarchy.
3. Has a useful string representation that includes the message.

No database or external services are used.
"""

from __future__ import annotations

import uuid

import pytest

from ai_tools.exceptions import (
    DatabaseConnectionError,
    GenerationError,
    NotFoundError,
    ProviderError,
    RateLimitError,
    UnauthorizedError,
    ValidationError,
)


def test_validation_error_stores_field_errors():
    """ValidationError keeps one {field, reason} entry per violated constraint.

    The 400 handler copies ``exc.errors`` verbatim into the response body.
    """
    errors = [{"field": "providerConfig.temperature", "reason": "must be <= 2"}]
    exc = ValidationError("Invalid OutlineRequest: 1 error(s)", errors=errors)

    assert isinstance(exc, Exception)
    assert str(exc) == "Invalid OutlineRequest: 1 error(s)"
    assert exc.errors == errors


def test_validation_error_defaults_errors_to_empty_list():
    exc = ValidationError("bad body")

    assert exc.errors == [], f"Default errors must be [], got {exc.errors}"


def test_provider_error_message_names_provider_and_reason():
    """ProviderError reads 'Failed to create <provider> model: <reason>'."""
    exc = ProviderError("mistral", "unsupported provider")

    assert str(exc) == "Failed to create mistral model: unsupported provider"
    assert exc.provider == "mistral"
    assert exc.reason == "unsupported provider"


def test_generation_error_carries_model_id():
    exc = GenerationError("rate limited upstream", model="openai:gpt-4o-mini")

    assert str(exc) == "rate limited upstream"
    assert exc.model == "openai:gpt-4o-mini"


def test_generation_error_model_is_optional():
    assert GenerationError("boom").model is None


def test_not_found_error_formats_resource_and_id():
    identifier = uuid.UUID("00000000-0000-0000-0000-000000000001")
    exc = NotFoundError("user", identifier)

    assert str(exc) == f"user with id={identifier} not found"
    assert exc.resource == "user"
    assert exc.identifier == str(identifier)


def test_unauthorized_error_default_message():
    assert str(UnauthorizedError()) == "Unauthorized"
    assert str(UnauthorizedError("Invalid API key")) == "Invalid API key"


def test_rate_limit_error_exposes_retry_after():
    exc = RateLimitError(42)

    assert exc.retry_after == 42
    assert "Rate limit" in str(exc)


def test_database_connection_error_message():
    exc = DatabaseConnectionError("connection refused")

    assert str(exc) == "connection refused"


@pytest.mark.parametrize(
    "exc",
    [
        ValidationError("x"),
        ProviderError("p", "r"),
        GenerationError("x"),
        NotFoundError("user", 1),
        UnauthorizedError(),
        RateLimitError(1),
        DatabaseConnectionError("x"),
    ],
)
def test_all_domain_errors_are_exceptions(exc):
    with pytest.raises(type(exc)):
        raise exc
