"""HTTP adapter – request/response envelopes."""
from __future__ import annotations

import dataclasses
import enum
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any, Generic, TypeVar

import httpx

T = TypeVar("T")

type HeadersLike = httpx.Headers | Mapping[str, str] | None


class HttpMethod(enum.StrEnum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"

    @classmethod
    def resolve(cls, value: HttpMethod | str) -> HttpMethod:
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls(value.upper())
        except (AttributeError, ValueError) as exc:
            raise ValueError(f"Unsupported HTTP method: {value!r}") from exc

    @property
    def allows_body(self) -> bool:
        return self not in (HttpMethod.GET, HttpMethod.HEAD, HttpMethod.OPTIONS, HttpMethod.TRACE)


def _to_headers(headers: HeadersLike) -> httpx.Headers:
    if isinstance(headers, httpx.Headers):
        return headers.copy()
    return httpx.Headers(dict(headers or {}))


@dataclasses.dataclass(frozen=True, init=False)
class HttpEntity(Generic[T]):
    """Headers plus an optional body."""

    headers: httpx.Headers
    body: T | None

    def __init__(self, body: T | None = None, headers: HeadersLike = None) -> None:
        object.__setattr__(self, "headers", _to_headers(headers))
        object.__setattr__(self, "body", body)

    @property
    def has_body(self) -> bool:
        return self.body is not None


@dataclasses.dataclass(frozen=True, init=False)
class ResponseEntity(HttpEntity[T]):
    """An :class:`HttpEntity` with the status code of the response it came from."""

    status_code: int

    def __init__(self, status_code: int, body: T | None = None, headers: HeadersLike = None) -> None:
        super().__init__(body, headers)
        object.__setattr__(self, "status_code", int(status_code))

    @property
    def status(self) -> HTTPStatus | int:
        """The status as an :class:`HTTPStatus` member, or the raw int if non-standard."""
        try:
            return HTTPStatus(self.status_code)
        except ValueError:
            return self.status_code

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def __repr__(self) -> str:
        return f"ResponseEntity(status_code={self.status_code}, body={self.body!r})"


__all__ = ["HeadersLike", "HttpEntity", "HttpMethod", "ResponseEntity"]
