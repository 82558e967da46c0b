"""Request-correlation id shared between the HTTP middleware and log records."""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar

_NO_REQUEST = "-"

_CURRENT_REQUEST_ID: ContextVar[str] = ContextVar("request_id", default=_NO_REQUEST)


def new_request_id() -> str:
    """Return a short random id for a request that did not bring its own."""
    return uuid.uuid4().hex[:12]


def get_request_id() -> str:
    """Return the id of the request being handled, or ``"-"`` outside one."""
    return _CURRENT_REQUEST_ID.get()


def set_request_id(request_id: str):
    """Bind ``request_id`` to the current context and return the reset token."""
    return _CURRENT_REQUEST_ID.set(request_id)


def reset_request_id(token) -> None:
    _CURRENT_REQUEST_ID.reset(token)


class RequestIdFilter(logging.Filter):
    """Attach ``record.request_id`` so format strings can reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = get_request_id()
        return True


def configure_logging(level: str) -> None:
    """Configure root logging with the request id in every line."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] [%(request_id)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
