"""Custom exception classes for the AI Tools API.

All domain-level errors should be raised as one of these typed exceptions so
that FastAPI exception handlers can convert them to structured HTTP responses.
"""

from __future__ import annotations

from typing import Any


class ValidationError(Exception):
    """Raised when a request payload violates its schema.

    Args:
        message: Summary of the failure.
        errors: One ``{"field": ..., "reason": ...}`` entry per violated
            constraint. ``field`` is a dotted path into the payload.
    """

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors: list[dict[str, Any]] = errors or []


class ProviderError(Exception):
    """Raised when a provider selection cannot be turned into a model handle.

    Args:
        provider: The provider name as supplied by the caller.
        reason: Why resolution failed (unknown provider, missing key, ...).
    """

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"Failed to create {provider} model: {reason}")
        self.provider: str = provider
        self.reason: str = reason


class GenerationError(Exception):
    """Raised when a remote model call fails or returns unusable output.

    Args:
        message: Description of the failure, usually the upstream message.
        model: Model identifier (``provider:model``) that was being called.
    """

    def __init__(self, message: str, model: str | None = None) -> None:
        super().__init__(message)
        self.model: str | None = model


class NotFoundError(Exception):
    """Raised when a referenced persisted entity does not exist.

    Args:
        resource: Kind of entity (``"user"``, ``"audio_recording"``, ...).
        identifier: The id that was looked up.
    """

    def __init__(self, resource: str, identifier: Any) -> None:
        super().__init__(f"{resource} with id={identifier} not found")
        self.resource: str = resource
        self.identifier: str = str(identifier)


class UnauthorizedError(Exception):
    """Raised when a credential is missing or invalid."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class RateLimitError(Exception):
    """Raised when a caller exceeds its request budget.

    Args:
        retry_after: Seconds until the caller may try again.
    """

    def __init__(self, retry_after: int) -> None:
        super().__init__("Rate limit exceeded")
        self.retry_after: int = retry_after


class DatabaseConnectionError(Exception):
    """Raised when a connection to PostgreSQL cannot be established.

    Args:
        message: Detail from the underlying driver exception.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
