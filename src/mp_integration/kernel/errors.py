"""Kernel error hierarchy.

Hierarchy::

    BaseError
    ├── ApplicationError
    │   ├── IllegalArgumentError   (also a ValueError)
    │   └── IllegalStateError      (also a RuntimeError)
    └── InfrastructureError
"""
from __future__ import annotations

import json
from typing import Any


class BaseError(Exception):
    """Root of the error hierarchy.

    Args:
        message: Human-readable description.
        code: Machine-readable slug (defaults to ``default_code``).
        detail: Arbitrary extra context (serialisable dict).
        cause: Original exception that triggered this error.
    """

    default_code: str = "base_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict (safe for structured logging)."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


class ApplicationError(BaseError):
    """Caller-side misuse of a component."""

    default_code = "application_error"


class IllegalArgumentError(ApplicationError, ValueError):
    """An argument is outside the set of values the operation accepts."""

    default_code = "illegal_argument"


class IllegalStateError(ApplicationError, RuntimeError):
    """The component is not in a state that permits the operation."""

    default_code = "illegal_state"


class InfrastructureError(BaseError):
    """I/O failure or failure of an external integration."""

    default_code = "infrastructure_error"


def require(condition: bool, message: str) -> None:
    """Raise ``IllegalArgumentError`` when *condition* is False."""
    if not condition:
        raise IllegalArgumentError(message)


def require_state(condition: bool, message: str) -> None:
    """Raise ``IllegalStateError`` when *condition* is False."""
    if not condition:
        raise IllegalStateError(message)


__all__ = [
    "ApplicationError",
    "BaseError",
    "IllegalArgumentError",
    "IllegalStateError",
    "InfrastructureError",
    "require",
    "require_state",
]
