"""HTTP adapter – expected response type descriptors.

A response type is one of three closed variants:

* :class:`NoBody` – the body is discarded, only status and headers are kept.
* :class:`Concrete` – the body is decoded into a plain class (``str``, ``bytes``,
  a dataclass, a pydantic model...).
* :class:`Generic` – the body is decoded into a parameterised type such as
  ``list[Order]`` or ``dict[str, int]``.

:meth:`ResponseType.of` turns the loose declarations callers write into one of
these; anything it does not recognise is rejected with
:class:`UnsupportedResponseTypeError`.
"""
from __future__ import annotations

import dataclasses
import types
import typing
from typing import Any, Final

from mp_integration.kernel.errors import IllegalArgumentError


class UnsupportedResponseTypeError(IllegalArgumentError, TypeError):
    """The expected response type is neither a class, a type reference nor 'no body'."""

    default_code = "unsupported_response_type"

    def __init__(self, value: object) -> None:
        super().__init__(
            "Unsupported expected response type: "
            f"{value!r}. Expected a class, a TypeReference or NO_BODY."
        )
        self.value = value


class _NoBodyMarker:
    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_BODY"


NO_BODY: Final = _NoBodyMarker()


class TypeReference:
    """Captures a parameterised type for body decoding, e.g. ``TypeReference(list[Order])``."""

    __slots__ = ("type",)

    def __init__(self, tp: Any) -> None:
        if tp is None:
            raise IllegalArgumentError("TypeReference requires a type")
        self.type = tp

    def __repr__(self) -> str:
        return f"TypeReference({self.type!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TypeReference) and other.type == self.type

    def __hash__(self) -> int:
        return hash(self.type)


@dataclasses.dataclass(frozen=True)
class NoBody:
    pass


@dataclasses.dataclass(frozen=True)
class Concrete:
    type: type[Any]


@dataclasses.dataclass(frozen=True)
class Generic:
    type: Any


type ResponseTypeVariant = NoBody | Concrete | Generic


class ResponseType:
    """Factory namespace for :data:`ResponseTypeVariant` values."""

    NO_BODY: Final = NoBody()

    @staticmethod
    def of(value: object) -> ResponseTypeVariant:
        if isinstance(value, NoBody | Concrete | Generic):
            return value
        if value is None or value is NO_BODY or value is type(None):
            return ResponseType.NO_BODY
        if isinstance(value, TypeReference):
            return Generic(value.type)
        if _is_parameterized(value):
            return Generic(value)
        if isinstance(value, type):
            return Concrete(value)
        raise UnsupportedResponseTypeError(value)


def _is_parameterized(value: object) -> bool:
    if isinstance(value, types.GenericAlias):
        return True
    return typing.get_origin(value) is not None and bool(typing.get_args(value))


__all__ = [
    "NO_BODY",
    "Concrete",
    "Generic",
    "NoBody",
    "ResponseType",
    "ResponseTypeVariant",
    "TypeReference",
    "UnsupportedResponseTypeError",
]
