"""HTTP adapter – request factories (connection and timeout settings)."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

if TYPE_CHECKING:
    from mp_integration.config.settings import HttpClientSettings


@runtime_checkable
class ClientHttpRequestFactory(Protocol):
    """Port: create the transport-level client that sends requests."""

    def create_client(self) -> httpx.Client: ...


class HttpxRequestFactory:
    """Builds a synchronous :class:`httpx.Client` with the configured transport options.

    ``transport`` lets tests or callers plug in an ``httpx.MockTransport`` or an
    ``httpx.HTTPTransport`` with custom retries / local address.
    """

    def __init__(
        self,
        timeout: httpx.Timeout | float = 30.0,
        *,
        follow_redirects: bool = False,
        limits: httpx.Limits | None = None,
        transport: httpx.BaseTransport | None = None,
        **client_kwargs: Any,
    ) -> None:
        self.timeout = timeout if isinstance(timeout, httpx.Timeout) else httpx.Timeout(timeout)
        self.follow_redirects = follow_redirects
        self.limits = limits or httpx.Limits()
        self.transport = transport
        self._client_kwargs = client_kwargs

    @classmethod
    def from_settings(cls, settings: HttpClientSettings) -> HttpxRequestFactory:
        return cls(
            httpx.Timeout(settings.read_timeout, connect=settings.connect_timeout),
            follow_redirects=settings.follow_redirects,
            limits=httpx.Limits(max_connections=settings.max_connections),
        )

    def create_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            follow_redirects=self.follow_redirects,
            limits=self.limits,
            transport=self.transport,
            **self._client_kwargs,
        )

    def __repr__(self) -> str:
        return f"HttpxRequestFactory(timeout={self.timeout!r}, follow_redirects={self.follow_redirects})"


__all__ = ["ClientHttpRequestFactory", "HttpxRequestFactory"]
