"""Outbound HTTP – message handler that executes HTTP requests."""
from mp_integration.adapters.http.outbound.base import (
    STATUS_CODE,
    AbstractHttpRequestExecutingMessageHandler,
    status_of,
)
from mp_integration.adapters.http.outbound.dsl import Http, HttpMessageHandlerSpec
from mp_integration.adapters.http.outbound.handler import HttpRequestExecutingMessageHandler
from mp_integration.adapters.http.outbound.header_mapper import DefaultHttpHeaderMapper, HttpHeaderMapper
from mp_integration.adapters.http.outbound.strategy import (
    ExchangeStrategy,
    FluentExchangeStrategy,
    TemplateExchangeStrategy,
)

__all__ = [
    "STATUS_CODE",
    "AbstractHttpRequestExecutingMessageHandler",
    "DefaultHttpHeaderMapper",
    "ExchangeStrategy",
    "FluentExchangeStrategy",
    "Http",
    "HttpHeaderMapper",
    "HttpMessageHandlerSpec",
    "HttpRequestExecutingMessageHandler",
    "TemplateExchangeStrategy",
    "status_of",
]
