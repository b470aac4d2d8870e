"""Outbound HTTP – message-to-request and response-to-reply translation.

:class:`AbstractHttpRequestExecutingMessageHandler` evaluates everything a
request needs from the inbound message (target, method, URI variables, expected
response type, entity) and builds the reply from the response; subclasses only
implement :meth:`exchange`.

"Expressions" are plain callables taking the inbound message; any other value
is a literal.
"""
from __future__ import annotations

import abc
from collections.abc import Callable, Mapping
from http import HTTPStatus
from typing import Any

import httpx

from mp_integration.adapters.http.converters import (
    APPLICATION_JSON,
    APPLICATION_OCTET_STREAM,
    TEXT_PLAIN_UTF8,
)
from mp_integration.adapters.http.entity import HttpEntity, HttpMethod, ResponseEntity
from mp_integration.adapters.http.outbound.header_mapper import DefaultHttpHeaderMapper, HttpHeaderMapper
from mp_integration.adapters.http.response_type import (
    ResponseType,
    ResponseTypeVariant,
    UnsupportedResponseTypeError,
)
from mp_integration.adapters.http.uri import EncodingMode, UriTemplateHandler
from mp_integration.kernel.errors import IllegalArgumentError, require, require_state
from mp_integration.kernel.messaging.handler import AbstractReplyProducingMessageHandler
from mp_integration.kernel.messaging.message import Message

STATUS_CODE = "http_statusCode"
COOKIE = "Cookie"
SET_COOKIE = "Set-Cookie"

type UriDescriptor = str | httpx.URL | Callable[[Message[Any]], str | httpx.URL]


def _evaluate(value: Any, message: Message[Any]) -> Any:
    return value(message) if callable(value) and not isinstance(value, type) else value


class AbstractHttpRequestExecutingMessageHandler(AbstractReplyProducingMessageHandler):

    def __init__(self, uri: UriDescriptor) -> None:
        super().__init__()
        require(uri is not None, "URI is required")
        self._uri = uri
        self.uri_factory = UriTemplateHandler()
        self._http_method: HttpMethod | Callable[[Message[Any]], HttpMethod | str] = HttpMethod.POST
        self._expected_response_type: Any = ResponseType.NO_BODY
        self._uri_variables: dict[str, Any] = {}
        self._header_mapper: HttpHeaderMapper = DefaultHttpHeaderMapper()
        self._expect_reply = True
        self._extract_payload = True
        self._transfer_cookies = False

    # -- configuration ---------------------------------------------------

    @property
    def expect_reply(self) -> bool:
        return self._expect_reply

    def set_expect_reply(self, expect_reply: bool) -> None:
        self._assert_not_initialized("expectReply")
        self._expect_reply = expect_reply

    @property
    def component_type(self) -> str:
        return "http:outbound-gateway" if self._expect_reply else "http:outbound-channel-adapter"

    def set_http_method(self, http_method: HttpMethod | str | Callable[[Message[Any]], HttpMethod | str]) -> None:
        if callable(http_method):
            self._http_method = http_method
            return
        try:
            self._http_method = HttpMethod.resolve(http_method)
        except ValueError as exc:
            raise IllegalArgumentError(str(exc), cause=exc) from exc

    def set_expected_response_type(self, expected_response_type: Any) -> None:
        """A class, ``TypeReference``, parameterised alias, ``NO_BODY`` or a callable producing one."""
        try:
            self._expected_response_type = ResponseType.of(expected_response_type)
        except UnsupportedResponseTypeError:
            if not callable(expected_response_type):
                raise
            self._expected_response_type = expected_response_type

    def set_uri_variables(self, uri_variables: Mapping[str, Any]) -> None:
        """Values may be literals or callables evaluated against each message."""
        self._uri_variables = dict(uri_variables)

    def set_uri_variable(self, name: str, value: Any) -> None:
        self._uri_variables[name] = value

    def set_header_mapper(self, header_mapper: HttpHeaderMapper) -> None:
        self._header_mapper = header_mapper

    def set_extract_payload(self, extract_payload: bool) -> None:
        self._extract_payload = extract_payload

    def set_transfer_cookies(self, transfer_cookies: bool) -> None:
        self._transfer_cookies = transfer_cookies

    def set_encoding_mode(self, encoding_mode: EncodingMode) -> None:
        self.uri_factory.encoding_mode = encoding_mode

    def _assert_not_initialized(self, option: str) -> None:
        require_state(
            not self.initialized,
            f"The option '{option}' cannot be changed after [{self}] has been initialized",
        )

    # -- request handling ----------------------------------------------

    def _handle_request_message(self, request_message: Message[Any]) -> Any:
        uri = _evaluate(self._uri, request_message)
        require_state(
            isinstance(uri, str | httpx.URL),
            f"'uri' must evaluate to a str or httpx.URL, not {type(uri).__name__}",
        )
        http_method = self._determine_http_method(request_message)
        uri_variables = {
            name: _evaluate(value, request_message) for name, value in self._uri_variables.items()
        }
        expected_response_type = ResponseType.of(_evaluate(self._expected_response_type, request_message))
        http_request = self._generate_http_request(request_message, http_method)
        return self.exchange(
            uri, http_method, http_request, expected_response_type, request_message, uri_variables
        )

    @abc.abstractmethod
    def exchange(
        self,
        uri: str | httpx.URL,
        http_method: HttpMethod,
        http_request: HttpEntity[Any],
        expected_response_type: ResponseTypeVariant,
        request_message: Message[Any],
        uri_variables: Mapping[str, Any],
    ) -> Any: ...

    def _determine_http_method(self, request_message: Message[Any]) -> HttpMethod:
        value = _evaluate(self._http_method, request_message)
        try:
            return HttpMethod.resolve(value)
        except ValueError as exc:
            raise IllegalArgumentError(str(exc), cause=exc) from exc

    def _generate_http_request(self, message: Message[Any], http_method: HttpMethod) -> HttpEntity[Any]:
        payload = message.payload
        if isinstance(payload, HttpEntity):
            return payload
        headers = self._header_mapper.from_headers(message.headers)
        if not http_method.allows_body:
            return HttpEntity(None, headers)
        body = payload if self._extract_payload else message
        if "content-type" not in headers and not isinstance(body, Message):
            headers["Content-Type"] = self._content_type_for(body)
        return HttpEntity(body, headers)

    @staticmethod
    def _content_type_for(body: Any) -> str:
        if isinstance(body, str):
            return TEXT_PLAIN_UTF8
        if isinstance(body, bytes | bytearray | memoryview):
            return APPLICATION_OCTET_STREAM
        return APPLICATION_JSON

    # -- reply -----------------------------------------------------------

    def _get_reply(self, response: ResponseEntity[Any]) -> Message[Any]:
        headers = self._header_mapper.to_headers(response.headers)
        if self._transfer_cookies:
            headers = self._transfer_set_cookie(headers, response)
        headers[STATUS_CODE] = response.status
        if response.has_body:
            body = response.body
            if isinstance(body, Message):
                return body.with_headers(headers)
            return Message.of(body, headers)
        return Message.of(response, headers)

    @staticmethod
    def _transfer_set_cookie(headers: dict[str, Any], response: ResponseEntity[Any]) -> dict[str, Any]:
        cookies = response.headers.get_list(SET_COOKIE)
        if not cookies:
            return headers
        transferred = {k: v for k, v in headers.items() if k.lower() != SET_COOKIE.lower()}
        transferred[COOKIE] = cookies[0] if len(cookies) == 1 else cookies
        return transferred


def status_of(reply: Message[Any]) -> HTTPStatus | int:
    """The HTTP status carried by a reply produced by this handler family."""
    return reply.headers[STATUS_CODE]


__all__ = [
    "COOKIE",
    "SET_COOKIE",
    "STATUS_CODE",
    "AbstractHttpRequestExecutingMessageHandler",
    "UriDescriptor",
    "status_of",
]
