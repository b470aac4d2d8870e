"""HTTP adapter – FluentHttpClient, the builder-configured fluent client.

Configuration is fixed once :meth:`FluentHttpClient.Builder.build` returns;
requests are described step by step::

    client = FluentHttpClient.builder().base_url("http://svc").build()
    entity = (
        client.method("GET")
        .uri("/orders/{id}", {"id": 42})
        .header("Accept", "application/json")
        .retrieve()
        .to_entity(Order)
    )
"""
from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Self

import httpx

from mp_integration.adapters.http.converters import HttpMessageConverter, default_converters
from mp_integration.adapters.http.entity import HttpMethod, ResponseEntity
from mp_integration.adapters.http.errors import ResponseErrorHandler
from mp_integration.adapters.http.request_factory import ClientHttpRequestFactory
from mp_integration.adapters.http.response_type import NO_BODY, ResponseType
from mp_integration.adapters.http.support import HttpAccessor
from mp_integration.adapters.http.uri import UriTemplateHandler
from mp_integration.kernel.errors import IllegalArgumentError, require_state


class ResponseSpec:
    """Terminal step: runs the exchange and decodes the response."""

    def __init__(self, request: RequestSpec) -> None:
        self._request = request

    def to_entity(self, response_type: Any) -> ResponseEntity[Any]:
        """Decode into a class or a :class:`TypeReference` / parameterised alias."""
        return self._request._exchange(ResponseType.of(response_type))

    def to_bodiless_entity(self) -> ResponseEntity[None]:
        return self._request._exchange(ResponseType.of(NO_BODY))

    def body(self, response_type: Any) -> Any:
        return self.to_entity(response_type).body


class RequestSpec:
    """Mutable description of one request."""

    def __init__(self, client: FluentHttpClient, method: HttpMethod) -> None:
        self._client = client
        self._method = method
        self._url: httpx.URL | None = None
        self._headers = httpx.Headers(client._default_headers)
        self._body: Any = None

    def uri(self, uri: httpx.URL | str, uri_variables: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Self:
        """Set the target: a URL object verbatim, or a template expanded with variables."""
        variables = {**(uri_variables or {}), **kwargs}
        self._url = self._client._accessor.resolve_url(uri, variables)
        return self

    def header(self, name: str, *values: str) -> Self:
        """Set *name* to *values*, replacing any earlier values."""
        items = [(k, v) for k, v in self._headers.multi_items() if k.lower() != name.lower()]
        items.extend((name, value) for value in values)
        self._headers = httpx.Headers(items)
        return self

    def headers(self, consumer: Callable[[httpx.Headers], None]) -> Self:
        """Give *consumer* direct access to the outgoing headers."""
        consumer(self._headers)
        return self

    def content_type(self, content_type: str) -> Self:
        return self.header("Content-Type", content_type)

    def accept(self, *media_types: str) -> Self:
        return self.header("Accept", ", ".join(media_types))

    def body(self, value: Any) -> Self:
        self._body = value
        return self

    def retrieve(self) -> ResponseSpec:
        return ResponseSpec(self)

    def _exchange(self, response_type: Any) -> ResponseEntity[Any]:
        require_state(self._url is not None, "uri(...) must be called before retrieve()")
        return self._client._accessor.execute(
            self._method, self._url, self._headers, self._body, response_type
        )


class FluentHttpClient:
    """Immutable fluent client; build one with :meth:`builder` or :meth:`create`."""

    def __init__(self, accessor: HttpAccessor, default_headers: Mapping[str, str] | None = None) -> None:
        self._accessor = accessor
        self._default_headers = dict(default_headers or {})

    @staticmethod
    def builder() -> FluentHttpClient.Builder:
        return FluentHttpClient.Builder()

    @staticmethod
    def create(accessor: HttpAccessor | None = None) -> FluentHttpClient:
        """Wrap an existing accessor (e.g. an ``HttpTemplate``), sharing its configuration."""
        return FluentHttpClient(accessor or HttpAccessor())

    def method(self, method: HttpMethod | str) -> RequestSpec:
        try:
            return RequestSpec(self, HttpMethod.resolve(method))
        except ValueError as exc:
            raise IllegalArgumentError(str(exc), cause=exc) from exc

    def get(self) -> RequestSpec:
        return self.method(HttpMethod.GET)

    def post(self) -> RequestSpec:
        return self.method(HttpMethod.POST)

    def put(self) -> RequestSpec:
        return self.method(HttpMethod.PUT)

    def patch(self) -> RequestSpec:
        return self.method(HttpMethod.PATCH)

    def delete(self) -> RequestSpec:
        return self.method(HttpMethod.DELETE)

    def close(self) -> None:
        self._accessor.close()

    def __repr__(self) -> str:
        return f"FluentHttpClient@{id(self):x}"

    class Builder:
        """Accumulates transport options until :meth:`build`."""

        def __init__(self) -> None:
            self._request_factory: ClientHttpRequestFactory | None = None
            self._message_converters: list[HttpMessageConverter] | None = None
            self._error_handler: ResponseErrorHandler | None = None
            self._uri_template_handler: UriTemplateHandler | None = None
            self._base_url: str | None = None
            self._default_headers: dict[str, str] = {}

        def request_factory(self, request_factory: ClientHttpRequestFactory) -> Self:
            self._request_factory = request_factory
            return self

        def message_converters(
            self,
            converters: Iterable[HttpMessageConverter] | Callable[[list[HttpMessageConverter]], None],
        ) -> Self:
            """Replace the converters, or pass a callable to edit the current list in place."""
            if callable(converters):
                current = self._message_converters or default_converters()
                converters(current)
                self._message_converters = current
            else:
                self._message_converters = list(converters)
            return self

        def default_status_handler(self, error_handler: ResponseErrorHandler) -> Self:
            self._error_handler = error_handler
            return self

        def uri_builder_factory(self, uri_template_handler: UriTemplateHandler) -> Self:
            self._uri_template_handler = uri_template_handler
            return self

        def base_url(self, base_url: str) -> Self:
            self._base_url = base_url
            return self

        def default_header(self, name: str, value: str) -> Self:
            self._default_headers[name] = value
            return self

        def build(self) -> FluentHttpClient:
            uri_handler = self._uri_template_handler or UriTemplateHandler()
            if self._base_url is not None:
                uri_handler.base_url = self._base_url
            accessor = HttpAccessor(
                request_factory=self._request_factory,
                message_converters=self._message_converters,
                error_handler=self._error_handler,
                uri_template_handler=uri_handler,
            )
            return FluentHttpClient(accessor, self._default_headers)


__all__ = ["FluentHttpClient", "RequestSpec", "ResponseSpec"]
