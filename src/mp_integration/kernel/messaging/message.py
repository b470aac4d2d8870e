"""Kernel messaging – immutable message envelope."""
from __future__ import annotations

import dataclasses
import time
from collections.abc import Iterator, Mapping
from typing import Any, Generic, TypeVar
from uuid import uuid4

T = TypeVar("T")

type MessageId = str

ID = "id"
TIMESTAMP = "timestamp"
CONTENT_TYPE = "contentType"
CORRELATION_ID = "correlationId"


class MessageHeaders(Mapping[str, Any]):
    """Read-only header map; ``id`` and ``timestamp`` are always populated."""

    __slots__ = ("_headers",)

    def __init__(self, headers: Mapping[str, Any] | None = None) -> None:
        values = dict(headers or {})
        values.setdefault(ID, str(uuid4()))
        values.setdefault(TIMESTAMP, int(time.time() * 1000))
        self._headers = values

    def __getitem__(self, key: str) -> Any:
        return self._headers[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"MessageHeaders({self._headers!r})"

    @property
    def id(self) -> MessageId:
        return self._headers[ID]

    @property
    def timestamp(self) -> int:
        return self._headers[TIMESTAMP]


@dataclasses.dataclass(frozen=True)
class Message(Generic[T]):
    """Transport-agnostic message: a payload plus headers."""

    payload: T
    headers: MessageHeaders = dataclasses.field(default_factory=MessageHeaders)

    def __post_init__(self) -> None:
        if self.payload is None:
            raise ValueError("Message payload must not be None")
        if not isinstance(self.headers, MessageHeaders):
            object.__setattr__(self, "headers", MessageHeaders(self.headers))

    @classmethod
    def of(cls, payload: T, headers: Mapping[str, Any] | None = None) -> Message[T]:
        return cls(payload, MessageHeaders(headers))

    def with_headers(self, headers: Mapping[str, Any]) -> Message[T]:
        """Copy of this message with *headers* merged over a fresh id/timestamp."""
        merged = {k: v for k, v in self.headers.items() if k not in (ID, TIMESTAMP)}
        merged.update(headers)
        return Message(self.payload, MessageHeaders(merged))


__all__ = [
    "CONTENT_TYPE",
    "CORRELATION_ID",
    "ID",
    "TIMESTAMP",
    "Message",
    "MessageHeaders",
    "MessageId",
]
