"""Custom exception types for luxscene."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional


class LuxSceneError(Exception):
    """Base class for scene building and export errors."""

    user_message: str = "Scene processing failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)
        if message is not None:
            self.user_message = message


class ValidationError(LuxSceneError, ValueError):
    """Raised when constructor input, a scene description or a dependency graph is invalid.

    ``field`` names the offending parameter (when there is one) and
    ``allowed`` describes the accepted values or shape.
    """

    user_message = "Scene validation failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        field: Optional[str] = None,
        allowed: Optional[Any] = None,
    ):
        self.field = field
        self.allowed = allowed
        if message is None and field is not None:
            message = f"Invalid value for {field!r}"
            if allowed is not None:
                message += f", expected {_describe(allowed)}"
        super().__init__(message)


class SceneReferenceError(LuxSceneError, LookupError):
    """Raised when a light or shape type discriminator is unknown."""

    user_message = "Unknown scene entity type"

    def __init__(self, message: str | None = None, *, kind: Optional[str] = None):
        self.kind = kind
        super().__init__(message)


def _describe(allowed: Any) -> str:
    if isinstance(allowed, str):
        return allowed
    if isinstance(allowed, Iterable):
        return "one of " + ", ".join(sorted(str(a) for a in allowed))
    return str(allowed)


__all__ = [
    "LuxSceneError",
    "SceneReferenceError",
    "ValidationError",
]
