"""Kernel – framework-agnostic building blocks (errors, messages, handlers)."""

from mp_integration.kernel.errors import (
    ApplicationError,
    BaseError,
    IllegalArgumentError,
    IllegalStateError,
    InfrastructureError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "IllegalArgumentError",
    "IllegalStateError",
    "InfrastructureError",
]
