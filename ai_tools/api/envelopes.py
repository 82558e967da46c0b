"""Helpers that wrap route results in the shared response envelopes."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi.responses import StreamingResponse

from ai_tools.request_context import get_request_id
from ai_tools.schemas.common import ErrorEnvelope, SuccessEnvelope
from ai_tools.services.generator import StreamResult, utc_now_iso

logger = logging.getLogger(__name__)

NDJSON_MEDIA_TYPE = "text/plain; charset=utf-8"


def success(data: Any) -> dict[str, Any]:
    """``{data, requestId, timestamp}`` for the current request."""
    return SuccessEnvelope[Any](
        data=data, request_id=get_request_id(), timestamp=utc_now_iso()
    ).model_dump(by_alias=True)


def failure(error: str, request_id: str | None = None, **extra: Any) -> dict[str, Any]:
    """``{error, requestId, timestamp, ...extra}``; defaults to the current request."""
    envelope = ErrorEnvelope(
        error=error,
        request_id=request_id or get_request_id(),
        timestamp=utc_now_iso(),
        **extra,
    )
    return envelope.model_dump(by_alias=True, exclude_none=True)


async def ndjson_lines(result: StreamResult, request_id: str | None = None) -> AsyncIterator[str]:
    """Serialise each chunk of *result* as one JSON line.

    A failure after the first byte can no longer change the status code, so
    it is reported as a trailing ``{"error": ..., "requestId": ...}`` line
    instead.
    """
    request_id = request_id or get_request_id()
    try:
        async for chunk in result:
            yield json.dumps(chunk, ensure_ascii=False) + "\n"
    except Exception as exc:
        logger.exception("Stream from %s failed", result.model)
        line = {"error": str(exc) or type(exc).__name__, "requestId": request_id}
        yield json.dumps(line, ensure_ascii=False) + "\n"
    finally:
        await result.aclose()


def stream_response(result: StreamResult) -> StreamingResponse:
    request_id = get_request_id()
    return StreamingResponse(
        ndjson_lines(result, request_id),
        media_type=NDJSON_MEDIA_TYPE,
        headers={
            "Cache-Control": "no-cache",
            "X-Request-ID": request_id,
        },
    )
