"""Outbound HTTP – mapping between message headers and HTTP headers."""
from __future__ import annotations

import fnmatch
from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

import httpx

from mp_integration.kernel.messaging.message import CONTENT_TYPE, ID, TIMESTAMP

STANDARD_REQUEST_HEADERS: tuple[str, ...] = (
    "Accept",
    "Accept-Charset",
    "Accept-Encoding",
    "Accept-Language",
    "Accept-Ranges",
    "Authorization",
    "Cache-Control",
    "Connection",
    "Content-Length",
    "Content-Type",
    "Cookie",
    "Date",
    "Expect",
    "From",
    "Host",
    "If-Match",
    "If-Modified-Since",
    "If-None-Match",
    "If-Range",
    "If-Unmodified-Since",
    "Max-Forwards",
    "Pragma",
    "Proxy-Authorization",
    "Range",
    "Referer",
    "TE",
    "Upgrade",
    "User-Agent",
    "Via",
    "Warning",
)

STANDARD_RESPONSE_HEADERS: tuple[str, ...] = (
    "Accept-Ranges",
    "Age",
    "Allow",
    "Cache-Control",
    "Connection",
    "Content-Encoding",
    "Content-Language",
    "Content-Length",
    "Content-Location",
    "Content-MD5",
    "Content-Range",
    "Content-Type",
    "Content-Disposition",
    "TE",
    "Date",
    "ETag",
    "Expires",
    "Last-Modified",
    "Location",
    "Pragma",
    "Proxy-Authenticate",
    "Retry-After",
    "Server",
    "Set-Cookie",
    "Trailer",
    "Transfer-Encoding",
    "Upgrade",
    "Vary",
    "Via",
    "Warning",
    "WWW-Authenticate",
)


@runtime_checkable
class HttpHeaderMapper(Protocol):
    """Port: message headers -> request headers, response headers -> reply headers."""

    def from_headers(self, headers: Mapping[str, Any]) -> httpx.Headers: ...

    def to_headers(self, headers: httpx.Headers) -> dict[str, Any]: ...


class DefaultHttpHeaderMapper:
    """Maps headers whose names match case-insensitive glob patterns.

    By default only the standard request headers leave the message and only the
    standard response headers come back; pass extra patterns (``"X-*"``, ``"*"``)
    to widen either direction.  The ``contentType`` message header maps to
    ``Content-Type`` both ways.
    """

    def __init__(
        self,
        outbound_header_names: Iterable[str] = STANDARD_REQUEST_HEADERS,
        inbound_header_names: Iterable[str] = STANDARD_RESPONSE_HEADERS,
    ) -> None:
        self._outbound = tuple(p.lower() for p in outbound_header_names)
        self._inbound = tuple(p.lower() for p in inbound_header_names)

    @staticmethod
    def _matches(name: str, patterns: tuple[str, ...]) -> bool:
        lowered = name.lower()
        return any(fnmatch.fnmatchcase(lowered, pattern) for pattern in patterns)

    def from_headers(self, headers: Mapping[str, Any]) -> httpx.Headers:
        items: list[tuple[str, str]] = []
        for name, value in headers.items():
            if name in (ID, TIMESTAMP) or value is None:
                continue
            header_name = "Content-Type" if name == CONTENT_TYPE else name
            if not self._matches(header_name, self._outbound):
                continue
            values = value if isinstance(value, list | tuple) else [value]
            items.extend((header_name, str(v)) for v in values)
        return httpx.Headers(items)

    def to_headers(self, headers: httpx.Headers) -> dict[str, Any]:
        mapped: dict[str, Any] = {}
        for name in headers.keys():
            if not self._matches(name, self._inbound):
                continue
            values = headers.get_list(name)
            key = CONTENT_TYPE if name.lower() == "content-type" else name
            mapped[key] = values[0] if len(values) == 1 else values
        return mapped


__all__ = [
    "STANDARD_REQUEST_HEADERS",
    "STANDARD_RESPONSE_HEADERS",
    "DefaultHttpHeaderMapper",
    "HttpHeaderMapper",
]
