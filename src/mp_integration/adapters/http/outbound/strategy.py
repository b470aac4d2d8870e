"""Outbound HTTP – one exchange capability, two client adapters."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

import httpx

from mp_integration.adapters.http.entity import HttpEntity, HttpMethod, ResponseEntity
from mp_integration.adapters.http.fluent import FluentHttpClient
from mp_integration.adapters.http.response_type import (
    Concrete,
    Generic,
    NoBody,
    ResponseTypeVariant,
    TypeReference,
    UnsupportedResponseTypeError,
)
from mp_integration.adapters.http.template import HttpTemplate


class ExchangeStrategy(Protocol):
    """Port: perform one request/response round trip."""

    @property
    def client(self) -> Any: ...

    def exchange(
        self,
        uri: httpx.URL | str,
        method: HttpMethod,
        request: HttpEntity[Any],
        response_type: ResponseTypeVariant,
        uri_variables: Mapping[str, Any],
    ) -> ResponseEntity[Any]: ...


class TemplateExchangeStrategy:
    """Delegates to :meth:`HttpTemplate.exchange`.

    A URL object is passed through untouched and *uri_variables* are dropped; a
    template string is handed over together with its variables.
    """

    def __init__(self, template: HttpTemplate) -> None:
        self._template = template

    @property
    def client(self) -> HttpTemplate:
        return self._template

    def exchange(
        self,
        uri: httpx.URL | str,
        method: HttpMethod,
        request: HttpEntity[Any],
        response_type: ResponseTypeVariant,
        uri_variables: Mapping[str, Any],
    ) -> ResponseEntity[Any]:
        match response_type:
            case Generic(type=tp):
                expected: Any = TypeReference(tp)
            case Concrete(type=tp):
                expected = tp
            case NoBody():
                expected = response_type
            case _:
                raise UnsupportedResponseTypeError(response_type)
        if isinstance(uri, httpx.URL):
            return self._template.exchange(uri, method, request, expected)
        return self._template.exchange(uri, method, request, expected, uri_variables)


class FluentExchangeStrategy:
    """Describes the request on a :class:`FluentHttpClient` and retrieves it."""

    def __init__(self, client: FluentHttpClient) -> None:
        self._client = client

    @property
    def client(self) -> FluentHttpClient:
        return self._client

    def exchange(
        self,
        uri: httpx.URL | str,
        method: HttpMethod,
        request: HttpEntity[Any],
        response_type: ResponseTypeVariant,
        uri_variables: Mapping[str, Any],
    ) -> ResponseEntity[Any]:
        spec = self._client.method(method)
        if isinstance(uri, httpx.URL):
            spec.uri(uri)
        else:
            spec.uri(uri, uri_variables)
        spec.headers(lambda headers: headers.update(request.headers))
        if request.body is not None:
            spec.body(request.body)

        response = spec.retrieve()
        match response_type:
            case NoBody():
                return response.to_bodiless_entity()
            case Generic():
                return response.to_entity(response_type)
            case Concrete():
                return response.to_entity(response_type)
            case _:
                raise UnsupportedResponseTypeError(response_type)


def strategy_for(client: HttpTemplate | FluentHttpClient) -> ExchangeStrategy:
    if isinstance(client, HttpTemplate):
        return TemplateExchangeStrategy(client)
    if isinstance(client, FluentHttpClient):
        return FluentExchangeStrategy(client)
    raise TypeError(f"Unsupported HTTP client: {client!r}")


__all__ = [
    "ExchangeStrategy",
    "FluentExchangeStrategy",
    "TemplateExchangeStrategy",
    "strategy_for",
]
