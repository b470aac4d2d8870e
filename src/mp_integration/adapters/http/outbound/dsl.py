"""Outbound HTTP – fluent configuration of the request-executing handler.

Usage::

    handler = (
        Http.outbound_gateway("http://svc/orders/{id}")
        .http_method("GET")
        .uri_variable("id", lambda m: m.headers["orderId"])
        .expected_response_type(Order)
        .get()
    )
"""
from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Self

from mp_integration.adapters.http.converters import HttpMessageConverter
from mp_integration.adapters.http.entity import HttpMethod
from mp_integration.adapters.http.errors import ResponseErrorHandler
from mp_integration.adapters.http.fluent import FluentHttpClient
from mp_integration.adapters.http.outbound.base import UriDescriptor
from mp_integration.adapters.http.outbound.handler import HttpRequestExecutingMessageHandler
from mp_integration.adapters.http.outbound.header_mapper import HttpHeaderMapper
from mp_integration.adapters.http.request_factory import ClientHttpRequestFactory
from mp_integration.adapters.http.template import HttpTemplate
from mp_integration.adapters.http.uri import EncodingMode
from mp_integration.config.errors import ClientConfigurationError
from mp_integration.kernel.messaging.message import Message

if TYPE_CHECKING:
    from mp_integration.config.settings import HttpClientSettings


class HttpMessageHandlerSpec:
    """Chainable setters over one :class:`HttpRequestExecutingMessageHandler`."""

    def __init__(
        self,
        uri: UriDescriptor,
        client: HttpTemplate | FluentHttpClient | None = None,
        *,
        expect_reply: bool = True,
    ) -> None:
        if isinstance(client, HttpTemplate):
            client = FluentHttpClient.create(client)
        self._client_set = client is not None
        self._target = HttpRequestExecutingMessageHandler(uri, client, expect_reply=expect_reply)

    @property
    def client_set(self) -> bool:
        return self._client_set

    def _assert_no_client(self, option: str) -> None:
        if self._client_set:
            raise ClientConfigurationError(option, f"the '{option}' must be specified on the provided client")

    def request_factory(self, request_factory: ClientHttpRequestFactory) -> Self:
        self._assert_no_client("requestFactory")
        self._target.set_request_factory(request_factory)
        return self

    def error_handler(self, error_handler: ResponseErrorHandler) -> Self:
        self._assert_no_client("errorHandler")
        self._target.set_error_handler(error_handler)
        return self

    def message_converters(self, *message_converters: HttpMessageConverter) -> Self:
        self._assert_no_client("messageConverters")
        self._target.set_message_converters(message_converters)
        return self

    def encoding_mode(self, encoding_mode: EncodingMode) -> Self:
        self._assert_no_client("encodingMode")
        self._target.set_encoding_mode(encoding_mode)
        return self

    def settings(self, settings: HttpClientSettings) -> Self:
        self._assert_no_client("settings")
        self._target.apply_settings(settings)
        return self

    def http_method(self, http_method: HttpMethod | str | Callable[[Message[Any]], HttpMethod | str]) -> Self:
        self._target.set_http_method(http_method)
        return self

    def expected_response_type(self, expected_response_type: Any) -> Self:
        self._target.set_expected_response_type(expected_response_type)
        return self

    def uri_variable(self, name: str, value: Any) -> Self:
        self._target.set_uri_variable(name, value)
        return self

    def extract_payload(self, extract_payload: bool) -> Self:
        self._target.set_extract_payload(extract_payload)
        return self

    def transfer_cookies(self, transfer_cookies: bool) -> Self:
        self._target.set_transfer_cookies(transfer_cookies)
        return self

    def header_mapper(self, header_mapper: HttpHeaderMapper) -> Self:
        self._target.set_header_mapper(header_mapper)
        return self

    def component_name(self, name: str) -> Self:
        self._target.component_name = name
        return self

    def get(self) -> HttpRequestExecutingMessageHandler:
        return self._target


class Http:
    """Factory namespace for outbound HTTP handler specs."""

    @staticmethod
    def outbound_gateway(
        uri: UriDescriptor,
        client: HttpTemplate | FluentHttpClient | None = None,
    ) -> HttpMessageHandlerSpec:
        return HttpMessageHandlerSpec(uri, client, expect_reply=True)

    @staticmethod
    def outbound_channel_adapter(
        uri: UriDescriptor,
        client: HttpTemplate | FluentHttpClient | None = None,
    ) -> HttpMessageHandlerSpec:
        return HttpMessageHandlerSpec(uri, client, expect_reply=False)


__all__ = ["Http", "HttpMessageHandlerSpec"]
