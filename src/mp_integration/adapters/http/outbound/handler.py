"""Outbound HTTP – HttpRequestExecutingMessageHandler.

Executes one HTTP request per inbound message through either an
:class:`HttpTemplate` or a :class:`FluentHttpClient`.  When the caller supplies
neither, the handler owns a :class:`FluentHttpClient.Builder` that collects
transport options until :meth:`initialize` builds the client.

With ``expect_reply=True`` (gateway) a reply message is produced from the
response: its payload is the body when there is one, otherwise the
:class:`ResponseEntity`, and the ``http_statusCode`` header carries the status.
With ``expect_reply=False`` (channel adapter) the response is discarded.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import httpx

from mp_integration.adapters.http.converters import HttpMessageConverter
from mp_integration.adapters.http.entity import HttpEntity, HttpMethod
from mp_integration.adapters.http.errors import ResponseErrorHandler, RestClientError
from mp_integration.adapters.http.fluent import FluentHttpClient
from mp_integration.adapters.http.outbound.base import (
    AbstractHttpRequestExecutingMessageHandler,
    UriDescriptor,
)
from mp_integration.adapters.http.outbound.strategy import ExchangeStrategy, strategy_for
from mp_integration.adapters.http.request_factory import ClientHttpRequestFactory, HttpxRequestFactory
from mp_integration.adapters.http.response_type import ResponseType
from mp_integration.adapters.http.template import HttpTemplate
from mp_integration.adapters.http.uri import EncodingMode
from mp_integration.config.errors import ClientConfigurationError
from mp_integration.kernel.errors import IllegalArgumentError, require, require_state
from mp_integration.kernel.messaging.errors import MessageHandlingError
from mp_integration.kernel.messaging.message import Message
from mp_integration.observability.logging import get_logger

if TYPE_CHECKING:
    from mp_integration.config.settings import HttpClientSettings

logger = get_logger(__name__)


class HttpRequestExecutingMessageHandler(AbstractHttpRequestExecutingMessageHandler):
    """Outbound HTTP gateway / channel adapter.

    Args:
        uri: Literal ``httpx.URL`` (used verbatim), template string (expanded with
            the configured URI variables) or a callable evaluated per message.
        client: Optional externally configured ``HttpTemplate`` or
            ``FluentHttpClient``.  Its transport settings then belong to the
            caller and the ``set_*`` transport options are rejected.
        expect_reply: ``True`` for gateway semantics, ``False`` for fire-and-forget.
    """

    def __init__(
        self,
        uri: UriDescriptor,
        client: HttpTemplate | FluentHttpClient | None = None,
        *,
        expect_reply: bool = True,
    ) -> None:
        if isinstance(uri, str):
            require(bool(uri.strip()), "URI is required")
        super().__init__(uri)
        self._expect_reply = expect_reply
        self._template: HttpTemplate | None = None
        self._fluent_client: FluentHttpClient | None = None
        self._client_builder: FluentHttpClient.Builder | None = None
        self._strategy: ExchangeStrategy | None = None

        if client is None:
            self._client_builder = FluentHttpClient.builder().uri_builder_factory(self.uri_factory)
        elif isinstance(client, HttpTemplate):
            self._template = client
        elif isinstance(client, FluentHttpClient):
            self._fluent_client = client
        else:
            raise IllegalArgumentError(
                f"'client' must be an HttpTemplate or a FluentHttpClient, not {type(client).__name__}"
            )
        self._template_explicitly_set = self._template is not None
        self._fluent_client_explicitly_set = self._fluent_client is not None

    @property
    def client(self) -> HttpTemplate | FluentHttpClient | None:
        """The client in use; ``None`` until an owned client has been built."""
        if self._template is not None:
            return self._template
        return self._fluent_client

    @property
    def externally_configured(self) -> bool:
        return self._template_explicitly_set or self._fluent_client_explicitly_set

    # -- transport options (owned client only) ----------------------------

    def _assert_local_client(self, option: str) -> FluentHttpClient.Builder:
        if self._template_explicitly_set:
            raise ClientConfigurationError(
                option,
                f"The option '{option}' must be provided on the externally configured "
                f"HttpTemplate: {self._template!r}",
            )
        if self._fluent_client_explicitly_set:
            raise ClientConfigurationError(
                option,
                f"The option '{option}' must be provided on the externally configured "
                f"FluentHttpClient: {self._fluent_client!r}",
            )
        self._assert_not_initialized(option)
        builder = self._client_builder
        require_state(builder is not None, "the client builder has already been consumed")
        return builder

    def set_error_handler(self, error_handler: ResponseErrorHandler) -> None:
        self._assert_local_client("errorHandler").default_status_handler(error_handler)

    def set_message_converters(self, message_converters: Iterable[HttpMessageConverter]) -> None:
        """Replace the default converters of the owned client."""
        self._assert_local_client("messageConverters").message_converters(list(message_converters))

    def set_request_factory(self, request_factory: ClientHttpRequestFactory) -> None:
        self._assert_local_client("requestFactory").request_factory(request_factory)

    def set_encoding_mode(self, encoding_mode: EncodingMode) -> None:
        self._assert_local_client("encodingMode on UriTemplateHandler")
        super().set_encoding_mode(encoding_mode)

    def apply_settings(self, settings: HttpClientSettings) -> None:
        """Configure the owned client's timeouts, pool and URI encoding from *settings*."""
        self.set_request_factory(HttpxRequestFactory.from_settings(settings))
        self.set_encoding_mode(settings.encoding_mode)

    # -- lifecycle --------------------------------------------------------

    def _on_init(self) -> None:
        if self._client_builder is not None:
            self._fluent_client = self._client_builder.build()
            self._client_builder = None
        client = self.client
        assert client is not None
        self._strategy = strategy_for(client)
        logger.debug(
            "http.handler_initialized",
            handler=str(self),
            component_type=self.component_type,
            client=type(client).__name__,
            externally_configured=self.externally_configured,
        )

    def close(self) -> None:
        """Close the owned client; externally configured clients are left alone."""
        if not self.externally_configured and self._fluent_client is not None:
            self._fluent_client.close()

    # -- exchange -----------------------------------------------------------

    def exchange(
        self,
        uri: str | httpx.URL,
        http_method: HttpMethod,
        http_request: HttpEntity[Any],
        expected_response_type: Any,
        request_message: Message[Any],
        uri_variables: Mapping[str, Any] | None = None,
    ) -> Message[Any] | None:
        self.initialize()
        strategy = self._strategy
        assert strategy is not None
        response_type = ResponseType.of(expected_response_type)
        try:
            http_response = strategy.exchange(
                uri, http_method, http_request, response_type, uri_variables or {}
            )
        except RestClientError as exc:
            logger.warning(
                "http.exchange_failed",
                handler=str(self),
                method=http_method.value,
                uri=str(uri),
                error=exc.to_dict(),
            )
            raise MessageHandlingError(
                request_message,
                f"HTTP request execution failed for URI [{uri}] in the [{self}]",
                cause=exc,
            ) from exc

        logger.debug(
            "http.exchange",
            handler=str(self),
            method=http_method.value,
            uri=str(uri),
            status=http_response.status_code,
        )
        if self.expect_reply:
            return self._get_reply(http_response)
        return None


__all__ = ["HttpRequestExecutingMessageHandler"]
