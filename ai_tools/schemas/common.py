"""Response envelopes shared by every endpoint."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class _Envelope(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    request_id: str
    timestamp: str


class SuccessEnvelope(_Envelope, Generic[T]):
    """``{data, requestId, timestamp}``."""

    data: T


class ErrorEnvelope(_Envelope):
    """``{error, requestId, timestamp}`` plus optional detail fields."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    error: str
    message: str | None = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    environment: str
    database: dict[str, Any]
