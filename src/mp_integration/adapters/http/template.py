"""HTTP adapter – HttpTemplate, the synchronous template-style client.

Every call names the URL, method, request entity and expected response type at
once::

    template = HttpTemplate()
    entity = template.exchange("http://svc/orders/{id}", "GET", None, Order, {"id": 42})
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from mp_integration.adapters.http.converters import HttpMessageConverter
from mp_integration.adapters.http.entity import HttpEntity, HttpMethod, ResponseEntity
from mp_integration.adapters.http.errors import ResponseErrorHandler
from mp_integration.adapters.http.request_factory import ClientHttpRequestFactory
from mp_integration.adapters.http.response_type import NO_BODY, ResponseType
from mp_integration.adapters.http.support import HttpAccessor
from mp_integration.adapters.http.uri import UriTemplateHandler


class HttpTemplate(HttpAccessor):
    """Template-style HTTP client with mutable transport configuration."""

    def set_error_handler(self, error_handler: ResponseErrorHandler) -> None:
        self._error_handler = error_handler

    def set_message_converters(self, message_converters: Iterable[HttpMessageConverter]) -> None:
        """Replace (not extend) the converters."""
        self._message_converters = list(message_converters)

    def set_request_factory(self, request_factory: ClientHttpRequestFactory) -> None:
        self._request_factory = request_factory
        self.close()

    def set_uri_template_handler(self, uri_template_handler: UriTemplateHandler) -> None:
        self._uri_template_handler = uri_template_handler

    def exchange(
        self,
        url: httpx.URL | str,
        method: HttpMethod | str,
        request: HttpEntity[Any] | None,
        response_type: Any,
        uri_variables: Mapping[str, Any] | None = None,
    ) -> ResponseEntity[Any]:
        """Execute one request.

        ``url`` may be an :class:`httpx.URL`, used verbatim (``uri_variables`` are
        ignored), or a template string expanded with ``uri_variables``.
        ``response_type`` is a class, a :class:`TypeReference`, a parameterised
        alias or ``NO_BODY``.
        """
        expected = ResponseType.of(response_type)
        entity = request if request is not None else HttpEntity()
        return self.execute(
            method,
            self.resolve_url(url, uri_variables),
            entity.headers,
            entity.body,
            expected,
        )

    def get_for_entity(self, url: httpx.URL | str, response_type: Any, **uri_variables: Any) -> ResponseEntity[Any]:
        return self.exchange(url, HttpMethod.GET, None, response_type, uri_variables)

    def post_for_entity(
        self,
        url: httpx.URL | str,
        body: Any,
        response_type: Any,
        **uri_variables: Any,
    ) -> ResponseEntity[Any]:
        request = body if isinstance(body, HttpEntity) else HttpEntity(body)
        return self.exchange(url, HttpMethod.POST, request, response_type, uri_variables)

    def delete(self, url: httpx.URL | str, **uri_variables: Any) -> None:
        self.exchange(url, HttpMethod.DELETE, None, NO_BODY, uri_variables)

    def __repr__(self) -> str:
        return f"HttpTemplate@{id(self):x}"


__all__ = ["HttpTemplate"]
