"""HTTP adapter – synchronous httpx-backed clients.

Two interchangeable client styles share one transport core:

* :class:`HttpTemplate` – template-style, one call per exchange, mutable setters.
* :class:`FluentHttpClient` – builder-configured, fluent request description.
"""
from mp_integration.adapters.http.converters import (
    BytesHttpMessageConverter,
    FormHttpMessageConverter,
    HttpMessageConverter,
    JsonHttpMessageConverter,
    StringHttpMessageConverter,
    default_converters,
)
from mp_integration.adapters.http.entity import HttpEntity, HttpMethod, ResponseEntity
from mp_integration.adapters.http.errors import (
    ConversionError,
    DefaultResponseErrorHandler,
    HttpClientErrorError,
    HttpServerErrorError,
    HttpStatusCodeError,
    NoOpResponseErrorHandler,
    ResourceAccessError,
    ResponseErrorHandler,
    RestClientError,
    RestClientResponseError,
    UnknownContentTypeError,
    UnknownHttpStatusCodeError,
    status_error,
)
from mp_integration.adapters.http.fluent import FluentHttpClient
from mp_integration.adapters.http.request_factory import ClientHttpRequestFactory, HttpxRequestFactory
from mp_integration.adapters.http.response_type import (
    NO_BODY,
    Concrete,
    Generic,
    NoBody,
    ResponseType,
    TypeReference,
    UnsupportedResponseTypeError,
)
from mp_integration.adapters.http.template import HttpTemplate
from mp_integration.adapters.http.uri import EncodingMode, UriTemplateHandler

__all__ = [
    "NO_BODY",
    "BytesHttpMessageConverter",
    "ClientHttpRequestFactory",
    "Concrete",
    "ConversionError",
    "DefaultResponseErrorHandler",
    "EncodingMode",
    "FluentHttpClient",
    "FormHttpMessageConverter",
    "Generic",
    "HttpClientErrorError",
    "HttpEntity",
    "HttpMessageConverter",
    "HttpMethod",
    "HttpServerErrorError",
    "HttpStatusCodeError",
    "HttpTemplate",
    "HttpxRequestFactory",
    "JsonHttpMessageConverter",
    "NoBody",
    "NoOpResponseErrorHandler",
    "ResourceAccessError",
    "ResponseEntity",
    "ResponseErrorHandler",
    "ResponseType",
    "RestClientError",
    "RestClientResponseError",
    "StringHttpMessageConverter",
    "TypeReference",
    "UnknownContentTypeError",
    "UnknownHttpStatusCodeError",
    "UnsupportedResponseTypeError",
    "UriTemplateHandler",
    "default_converters",
    "status_error",
]
