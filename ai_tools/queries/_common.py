"""Helpers shared by the query modules."""

from __future__ import annotations

from collections.abc import Iterable

from ai_tools.exceptions import ValidationError


def check_status(status: str, allowed: Iterable[str]) -> None:
    """Raise :class:`ValidationError` if *status* is outside *allowed*."""
    allowed = tuple(allowed)
    if status not in allowed:
        raise ValidationError(
            f"Invalid status {status!r}",
            errors=[{"field": "status", "reason": f"must be one of {', '.join(allowed)}"}],
        )
