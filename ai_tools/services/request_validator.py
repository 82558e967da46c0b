"""Turn untyped request bodies into validated, immutable request objects."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import pydantic

from ai_tools.exceptions import ValidationError

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=pydantic.BaseModel)


def format_error_location(loc: tuple[Any, ...]) -> str:
    """Join a pydantic error location into a dotted field path.

    ``("body", "providerConfig", "temperature")`` becomes
    ``"providerConfig.temperature"``; list indices stay numeric
    (``"questionTypes.1"``).
    """
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def errors_from_pydantic(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Convert pydantic's error dicts to ``{"field", "reason"}`` pairs."""
    return [
        {"field": format_error_location(tuple(err.get("loc", ()))), "reason": err.get("msg", "")}
        for err in errors
    ]


def parse_request(schema: type[RequestT], payload: Any) -> RequestT:
    """Validate *payload* against *schema* and return the populated model.

    Every optional field receives its declared default.  Out-of-range numbers
    and unknown enum members are rejected, never clamped.

    Args:
        schema: The pydantic request model to apply.
        payload: Parsed JSON (normally a ``dict``) or an instance of *schema*.

    Returns:
        A validated (frozen) instance of *schema*.

    Raises:
        ValidationError: Listing every violated constraint.
    """
    if isinstance(payload, schema):
        return payload
    if not isinstance(payload, dict):
        raise ValidationError(
            "Request body must be a JSON object",
            errors=[{"field": "body", "reason": f"expected object, got {type(payload).__name__}"}],
        )

    try:
        return schema.model_validate(payload)
    except pydantic.ValidationError as exc:
        field_errors = errors_from_pydantic(exc.errors())
        logger.info(
            "%s rejected: %s",
            schema.__name__,
            ", ".join(f"{e['field']}: {e['reason']}" for e in field_errors),
        )
        raise ValidationError(
            f"Invalid {schema.__name__}: {len(field_errors)} error(s)",
            errors=field_errors,
        ) from exc
