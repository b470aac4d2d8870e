"""HTTP adapter – shared request execution for the template and fluent clients."""
from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from mp_integration.adapters.http.converters import HttpMessageConverter, default_converters
from mp_integration.adapters.http.entity import HeadersLike, HttpMethod, ResponseEntity
from mp_integration.adapters.http.errors import (
    ConversionError,
    DefaultResponseErrorHandler,
    ResourceAccessError,
    ResponseErrorHandler,
    RestClientError,
    RestClientResponseError,
    UnknownContentTypeError,
    status_error,
)
from mp_integration.adapters.http.request_factory import ClientHttpRequestFactory, HttpxRequestFactory
from mp_integration.adapters.http.response_type import (
    Concrete,
    Generic,
    NoBody,
    ResponseTypeVariant,
    UnsupportedResponseTypeError,
)
from mp_integration.adapters.http.uri import UriTemplateHandler
from mp_integration.kernel.errors import ApplicationError
from mp_integration.observability.logging import get_logger

logger = get_logger(__name__)


class HttpAccessor:
    """Owns the transport configuration and performs one exchange at a time.

    The underlying :class:`httpx.Client` is created from the request factory on
    first use and reused afterwards; ``httpx.Client`` is safe to share between
    threads.
    """

    def __init__(
        self,
        *,
        request_factory: ClientHttpRequestFactory | None = None,
        message_converters: Iterable[HttpMessageConverter] | None = None,
        error_handler: ResponseErrorHandler | None = None,
        uri_template_handler: UriTemplateHandler | None = None,
    ) -> None:
        self._request_factory: ClientHttpRequestFactory = request_factory or HttpxRequestFactory()
        self._message_converters = list(message_converters) if message_converters else default_converters()
        self._error_handler: ResponseErrorHandler = error_handler or DefaultResponseErrorHandler()
        self._uri_template_handler = uri_template_handler or UriTemplateHandler()
        self._client: httpx.Client | None = None
        self._client_lock = threading.Lock()

    @property
    def request_factory(self) -> ClientHttpRequestFactory:
        return self._request_factory

    @property
    def message_converters(self) -> list[HttpMessageConverter]:
        return list(self._message_converters)

    @property
    def error_handler(self) -> ResponseErrorHandler:
        return self._error_handler

    @property
    def uri_template_handler(self) -> UriTemplateHandler:
        return self._uri_template_handler

    def _http_client(self) -> httpx.Client:
        client = self._client
        if client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = self._request_factory.create_client()
                client = self._client
        return client

    def close(self) -> None:
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> HttpAccessor:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def resolve_url(self, uri: httpx.URL | str, uri_variables: Mapping[str, Any] | None = None) -> httpx.URL:
        """A URL object is used as is; a string is expanded as a template."""
        if isinstance(uri, httpx.URL):
            return uri
        return self._uri_template_handler.expand(uri, uri_variables)

    def execute(
        self,
        method: HttpMethod | str,
        url: httpx.URL,
        headers: HeadersLike,
        body: Any,
        response_type: ResponseTypeVariant,
    ) -> ResponseEntity[Any]:
        """Send one request; every failure surfaces as a :class:`RestClientError`.

        Errors raised by a custom error handler or converter are translated:
        ``httpx.HTTPStatusError`` into the matching status error, other
        ``httpx.HTTPError`` into :class:`ResourceAccessError`, anything else into
        :class:`RestClientResponseError` (error handler) or
        :class:`ConversionError` (converters). Caller misuse
        (:class:`ApplicationError`) is not translated.
        """
        http_method = HttpMethod.resolve(method)
        request_headers = httpx.Headers(headers) if headers is not None else httpx.Headers()
        content = None
        if body is not None:
            try:
                content = self._write_body(body, request_headers)
            except (RestClientError, ApplicationError):
                raise
            except Exception as exc:
                raise ConversionError(
                    f'Could not write request body for {http_method.value} request to "{url}": {exc}',
                    cause=exc,
                ) from exc

        logger.debug("http.request", method=http_method.value, url=str(url))
        try:
            response = self._http_client().request(
                http_method.value, url, headers=request_headers, content=content
            )
        except httpx.HTTPError as exc:
            raise ResourceAccessError(
                f'I/O error on {http_method.value} request for "{url}": {exc}',
                cause=exc,
            ) from exc
        logger.debug("http.response", method=http_method.value, url=str(url), status=response.status_code)

        self._handle_error(url, http_method, response)
        try:
            payload = self._read_body(response_type, response)
        except (RestClientError, ApplicationError):
            raise
        except Exception as exc:
            raise ConversionError(
                f'Could not read response body of {http_method.value} request to "{url}": {exc}',
                cause=exc,
            ) from exc
        return ResponseEntity(response.status_code, payload, response.headers)

    def _handle_error(self, url: httpx.URL, method: HttpMethod, response: httpx.Response) -> None:
        try:
            if self._error_handler.has_error(response):
                self._error_handler.handle_error(url, method.value, response)
        except RestClientError:
            raise
        except httpx.HTTPStatusError as exc:
            raise status_error(url, method.value, response, cause=exc) from exc
        except httpx.HTTPError as exc:
            raise ResourceAccessError(
                f'I/O error on {method.value} request for "{url}": {exc}',
                cause=exc,
            ) from exc
        except Exception as exc:
            raise RestClientResponseError(
                f'Error handler failed on {method.value} request for "{url}": {exc}',
                status_code=response.status_code,
                headers=response.headers,
                body=response.content,
                cause=exc,
            ) from exc

    def _write_body(self, body: Any, headers: httpx.Headers) -> bytes:
        content_type = headers.get("content-type")
        for converter in self._message_converters:
            if converter.can_write(body, content_type):
                data = converter.write(body, content_type)
                if content_type is None:
                    headers["content-type"] = converter.default_content_type
                return data
        raise UnknownContentTypeError(type(body), content_type)

    def _read_body(self, response_type: ResponseTypeVariant, response: httpx.Response) -> Any:
        match response_type:
            case NoBody():
                return None
            case Concrete(type=target) | Generic(type=target):
                if not response.content:
                    return None
                content_type = response.headers.get("content-type")
                for converter in self._message_converters:
                    if converter.can_read(target, content_type):
                        return converter.read(target, response.content, content_type)
                raise UnknownContentTypeError(target, content_type)
            case _:
                raise UnsupportedResponseTypeError(response_type)


__all__ = ["HttpAccessor"]
