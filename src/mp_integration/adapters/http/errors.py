"""HTTP adapter – client errors and response error handling.

Every failure raised while executing a request derives from
:class:`RestClientError`::

    RestClientError
    ├── ResourceAccessError           I/O: connect, timeout, protocol
    ├── ConversionError               body could not be (de)serialized
    │   └── UnknownContentTypeError   no converter for the body/type
    └── RestClientResponseError       response rejected by the error handler
        ├── HttpStatusCodeError
        │   ├── HttpClientErrorError  4xx
        │   └── HttpServerErrorError  5xx
        └── UnknownHttpStatusCodeError
"""
from __future__ import annotations

from http import HTTPStatus
from typing import Any, Protocol, runtime_checkable

import httpx

from mp_integration.kernel.errors import InfrastructureError


class RestClientError(InfrastructureError):
    """Base class for failures raised by an HTTP client."""

    default_code = "rest_client_error"


class ResourceAccessError(RestClientError):
    """The request could not be sent or the response could not be received."""

    default_code = "resource_access_error"


class ConversionError(RestClientError):
    """A request or response body could not be converted."""

    default_code = "conversion_error"


class UnknownContentTypeError(ConversionError):
    """No registered converter handles the body type / content type pair."""

    default_code = "unknown_content_type"

    def __init__(self, target: Any, content_type: str | None, **kwargs: Any) -> None:
        super().__init__(
            f"No converter for [{target!r}] and content type [{content_type}]",
            **kwargs,
        )
        self.target = target
        self.content_type = content_type


class RestClientResponseError(RestClientError):
    """A response was received but rejected by the configured error handler."""

    default_code = "rest_client_response_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        headers: httpx.Headers | None = None,
        body: bytes = b"",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, detail={"status_code": status_code}, **kwargs)
        self.status_code = status_code
        self.response_headers = headers or httpx.Headers()
        self.response_body = body

    @property
    def response_text(self) -> str:
        return self.response_body.decode("utf-8", errors="replace")


class HttpStatusCodeError(RestClientResponseError):
    default_code = "http_status_error"


class HttpClientErrorError(HttpStatusCodeError):
    default_code = "http_client_error"


class HttpServerErrorError(HttpStatusCodeError):
    default_code = "http_server_error"


class UnknownHttpStatusCodeError(RestClientResponseError):
    default_code = "unknown_http_status"


def status_error(
    url: httpx.URL,
    method: str,
    response: httpx.Response,
    *,
    cause: BaseException | None = None,
) -> RestClientResponseError:
    """Build the status error matching *response*: 4xx, 5xx or unknown."""
    status = response.status_code
    body = response.content
    try:
        reason = HTTPStatus(status).phrase
    except ValueError:
        reason = response.reason_phrase or ""
    message = f"{status} {reason} on {method} request for \"{url}\""
    text = body.decode("utf-8", errors="replace").strip()
    if text:
        message = f"{message}: {text[:200]}"
    kwargs: dict[str, Any] = {"status_code": status, "headers": response.headers, "body": body, "cause": cause}
    if 400 <= status < 500:
        return HttpClientErrorError(message, **kwargs)
    if 500 <= status < 600:
        return HttpServerErrorError(message, **kwargs)
    return UnknownHttpStatusCodeError(message, **kwargs)


@runtime_checkable
class ResponseErrorHandler(Protocol):
    """Decides whether a response is an error and raises for it."""

    def has_error(self, response: httpx.Response) -> bool: ...

    def handle_error(self, url: httpx.URL, method: str, response: httpx.Response) -> None: ...


class DefaultResponseErrorHandler:
    """Treats any 4xx or 5xx status as an error."""

    def has_error(self, response: httpx.Response) -> bool:
        return response.status_code >= 400

    def handle_error(self, url: httpx.URL, method: str, response: httpx.Response) -> None:
        raise status_error(url, method, response)


class NoOpResponseErrorHandler:
    """Accepts every status; the caller inspects :attr:`ResponseEntity.status_code`."""

    def has_error(self, response: httpx.Response) -> bool:  # noqa: ARG002
        return False

    def handle_error(self, url: httpx.URL, method: str, response: httpx.Response) -> None:
        """Never called."""


__all__ = [
    "ConversionError",
    "DefaultResponseErrorHandler",
    "HttpClientErrorError",
    "HttpServerErrorError",
    "HttpStatusCodeError",
    "NoOpResponseErrorHandler",
    "ResourceAccessError",
    "ResponseErrorHandler",
    "RestClientError",
    "RestClientResponseError",
    "UnknownContentTypeError",
    "UnknownHttpStatusCodeError",
    "status_error",
]
