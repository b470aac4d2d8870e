"""Unit tests – HttpRequestExecutingMessageHandler (outbound gateway / channel adapter)."""
from __future__ import annotations

import dataclasses
import json
from http import HTTPStatus
from typing import Any

import httpx
import pytest
import respx
from structlog.testing import capture_logs

from mp_integration.adapters.http import (
    NO_BODY,
    ConversionError,
    EncodingMode,
    FluentHttpClient,
    HttpClientErrorError,
    HttpEntity,
    HttpMessageConverter,
    HttpMethod,
    HttpServerErrorError,
    HttpTemplate,
    HttpxRequestFactory,
    NoOpResponseErrorHandler,
    ResourceAccessError,
    ResponseEntity,
    RestClientResponseError,
    StringHttpMessageConverter,
    TypeReference,
    UnsupportedResponseTypeError,
)
from mp_integration.adapters.http.outbound import (
    STATUS_CODE,
    FluentExchangeStrategy,
    HttpRequestExecutingMessageHandler,
    TemplateExchangeStrategy,
    status_of,
)
from mp_integration.config import ClientConfigurationError, HttpClientSettings
from mp_integration.kernel.errors import IllegalArgumentError, IllegalStateError
from mp_integration.kernel.messaging import Message, MessageHandlingError

TARGET = "http://example.org/api"


@dataclasses.dataclass
class Item:
    id: int
    name: str


def _gateway(uri: Any = TARGET, client: Any = None, **kwargs: Any) -> HttpRequestExecutingMessageHandler:
    handler = HttpRequestExecutingMessageHandler(uri, client, **kwargs)
    handler.set_http_method(HttpMethod.GET)
    handler.set_expected_response_type(str)
    return handler


def _clients() -> list[Any]:
    return [HttpTemplate(), FluentHttpClient.builder().build()]


class RaiseForStatusErrorHandler:
    def has_error(self, response: httpx.Response) -> bool:
        return response.is_error

    def handle_error(self, url: httpx.URL, method: str, response: httpx.Response) -> None:
        response.raise_for_status()


class BrokenErrorHandler:
    def has_error(self, response: httpx.Response) -> bool:
        return True

    def handle_error(self, url: httpx.URL, method: str, response: httpx.Response) -> None:
        raise RuntimeError("handler bug")


class BrokenConverter(HttpMessageConverter):
    def can_read(self, target_type: Any, content_type: str | None) -> bool:
        return True

    def read(self, target_type: Any, content: bytes, content_type: str | None) -> Any:
        raise KeyError("missing field")

    def can_write(self, value: Any, content_type: str | None) -> bool:
        return True

    def write(self, value: Any, content_type: str | None) -> bytes:
        raise KeyError("missing field")


# ---------------------------------------------------------------------------
# Construction and component identity
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_blank_uri_rejected(self) -> None:
        with pytest.raises(IllegalArgumentError, match="URI is required"):
            HttpRequestExecutingMessageHandler("  ")

    def test_unknown_client_type_rejected(self) -> None:
        with pytest.raises(IllegalArgumentError):
            HttpRequestExecutingMessageHandler(TARGET, object())  # type: ignore[arg-type]

    def test_component_type_gateway(self) -> None:
        assert HttpRequestExecutingMessageHandler(TARGET).component_type == "http:outbound-gateway"

    def test_component_type_channel_adapter(self) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET, expect_reply=False)
        assert handler.component_type == "http:outbound-channel-adapter"

    @pytest.mark.parametrize("client", _clients())
    def test_external_client_marks_handler(self, client: Any) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET, client)
        assert handler.externally_configured
        assert handler.client is client


# ---------------------------------------------------------------------------
# Transport options
# ---------------------------------------------------------------------------


class TestTransportOptions:
    @pytest.mark.parametrize("client", _clients())
    @pytest.mark.parametrize(
        ("setter", "argument", "option"),
        [
            ("set_error_handler", NoOpResponseErrorHandler(), "errorHandler"),
            ("set_message_converters", [StringHttpMessageConverter()], "messageConverters"),
            ("set_request_factory", HttpxRequestFactory(), "requestFactory"),
            ("set_encoding_mode", EncodingMode.NONE, "encodingMode on UriTemplateHandler"),
        ],
    )
    def test_rejected_for_external_client(self, client: Any, setter: str, argument: Any, option: str) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET, client)
        with pytest.raises(ClientConfigurationError) as exc_info:
            getattr(handler, setter)(argument)
        err = exc_info.value
        assert err.option == option
        assert f"The option '{option}' must be provided on the externally configured" in err.message
        assert type(client).__name__ in err.message
        assert handler.client is client
        handler.initialize()
        assert handler.client is client

    def test_owned_client_accepts_options_until_initialized(self) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET)
        handler.set_error_handler(NoOpResponseErrorHandler())
        handler.set_message_converters([StringHttpMessageConverter()])
        handler.set_request_factory(HttpxRequestFactory(timeout=1.0))
        handler.set_encoding_mode(EncodingMode.VALUES_ONLY)
        assert not handler.initialized
        assert handler.client is None

        handler.initialize()

        assert handler.initialized
        assert isinstance(handler.client, FluentHttpClient)
        assert not handler.externally_configured

    def test_late_configuration_rejected(self) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET)
        handler.initialize()
        with pytest.raises(IllegalStateError, match="errorHandler"):
            handler.set_error_handler(NoOpResponseErrorHandler())

    def test_initialize_is_idempotent(self) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET)
        handler.initialize()
        client = handler.client
        handler.initialize()
        assert handler.client is client

    @respx.mock
    def test_owned_error_handler_applied(self) -> None:
        respx.get(TARGET).mock(return_value=httpx.Response(500, text="boom"))
        handler = _gateway()
        handler.set_error_handler(NoOpResponseErrorHandler())
        reply = handler.handle_message(Message.of("x"))
        assert reply is not None
        assert reply.payload == "boom"
        assert status_of(reply) == HTTPStatus.INTERNAL_SERVER_ERROR

    @respx.mock
    def test_owned_encoding_mode_applied(self) -> None:
        route = respx.route(method="GET", host="example.org").mock(return_value=httpx.Response(200))
        handler = _gateway("http://example.org/files/{name}")
        handler.set_uri_variable("name", "a b/c")
        handler.set_encoding_mode(EncodingMode.URI_COMPONENT)
        handler.handle_message(Message.of("x"))
        assert route.calls.last.request.url.raw_path == b"/files/a%20b/c"

    def test_apply_settings(self) -> None:
        settings = HttpClientSettings(
            connect_timeout=1.5, read_timeout=4.0, encoding_mode=EncodingMode.URI_COMPONENT
        )
        handler = HttpRequestExecutingMessageHandler(TARGET)
        handler.apply_settings(settings)
        handler.initialize()
        assert handler.uri_factory.encoding_mode is EncodingMode.URI_COMPONENT
        factory = handler.client._accessor.request_factory
        assert factory.timeout.connect == 1.5
        assert factory.timeout.read == 4.0

    @respx.mock
    def test_apply_settings_encoding_mode_used_for_expansion(self) -> None:
        route = respx.route(method="GET", host="example.org").mock(return_value=httpx.Response(200))
        handler = _gateway("http://example.org/files/{name}")
        handler.set_uri_variable("name", "a b/c")
        handler.apply_settings(HttpClientSettings(encoding_mode=EncodingMode.URI_COMPONENT))
        handler.handle_message(Message.of("x"))
        assert route.calls.last.request.url.raw_path == b"/files/a%20b/c"

    @pytest.mark.parametrize("client", _clients())
    def test_apply_settings_rejected_for_external_client(self, client: Any) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET, client)
        with pytest.raises(ClientConfigurationError):
            handler.apply_settings(HttpClientSettings())

    def test_owned_request_factory_applied(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=str(request.url)))
        handler = _gateway()
        handler.set_request_factory(HttpxRequestFactory(transport=transport))
        reply = handler.handle_message(Message.of("x"))
        assert reply is not None
        assert reply.payload == TARGET


# ---------------------------------------------------------------------------
# Strategy selection
# ---------------------------------------------------------------------------


class TestStrategySelection:
    def test_template_client_uses_template_strategy(self) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET, HttpTemplate())
        handler.initialize()
        assert isinstance(handler._strategy, TemplateExchangeStrategy)

    @pytest.mark.parametrize("client", [None, FluentHttpClient.builder().build()])
    def test_fluent_strategy_otherwise(self, client: Any) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET, client)
        handler.initialize()
        assert isinstance(handler._strategy, FluentExchangeStrategy)


# ---------------------------------------------------------------------------
# Exchange
# ---------------------------------------------------------------------------


class TestExchange:
    @respx.mock
    @pytest.mark.parametrize("client", [None, *_clients()])
    def test_gateway_returns_body_as_reply(self, client: Any) -> None:
        route = respx.get(TARGET).mock(return_value=httpx.Response(200, text="pong"))
        handler = _gateway(client=client)
        handler.initialize()
        reply = handler.handle_message(Message.of("ping"))
        assert reply is not None
        assert reply.payload == "pong"
        assert reply.headers[STATUS_CODE] == HTTPStatus.OK
        assert route.call_count == 1
        assert route.calls.last.request.content == b""

    @respx.mock
    @pytest.mark.parametrize("client", [None, *_clients()])
    def test_channel_adapter_returns_nothing(self, client: Any) -> None:
        route = respx.get(TARGET).mock(return_value=httpx.Response(200, text="pong"))
        handler = _gateway(client=client, expect_reply=False)
        assert handler.handle_message(Message.of("ping")) is None
        assert route.called

    @respx.mock
    @pytest.mark.parametrize("client", [None, *_clients()])
    def test_url_object_is_not_expanded(self, client: Any) -> None:
        route = respx.get("http://example.org/items/42").mock(return_value=httpx.Response(200, text="ok"))
        handler = _gateway(httpx.URL("http://example.org/items/42"), client)
        handler.set_uri_variable("id", "99")
        handler.handle_message(Message.of("x"))
        assert route.call_count == 1
        assert route.calls.last.request.url == httpx.URL("http://example.org/items/42")

    @respx.mock
    @pytest.mark.parametrize("client", [None, *_clients()])
    def test_template_variables_substituted(self, client: Any) -> None:
        route = respx.get("http://example.org/items/7").mock(return_value=httpx.Response(200, text="ok"))
        handler = _gateway("http://example.org/items/{id}", client)
        handler.set_uri_variables({"id": lambda m: m.headers["itemId"], "unused": "ignored"})
        handler.handle_message(Message.of("x", {"itemId": 7}))
        assert route.call_count == 1

    @respx.mock
    @pytest.mark.parametrize("client", [None, *_clients()])
    def test_no_body_expected(self, client: Any) -> None:
        respx.get(TARGET).mock(return_value=httpx.Response(202, text="raw payload"))
        handler = _gateway(client=client)
        handler.set_expected_response_type(NO_BODY)
        reply = handler.handle_message(Message.of("x"))
        assert reply is not None
        assert isinstance(reply.payload, ResponseEntity)
        assert reply.payload.body is None
        assert reply.payload.status_code == 202
        assert reply.headers[STATUS_CODE] == HTTPStatus.ACCEPTED

    @respx.mock
    @pytest.mark.parametrize("client", [None, *_clients()])
    def test_generic_response_type(self, client: Any) -> None:
        respx.get(TARGET).mock(return_value=httpx.Response(200, json=[{"id": 1, "name": "a"}]))
        handler = _gateway(client=client)
        handler.set_expected_response_type(TypeReference(list[Item]))
        reply = handler.handle_message(Message.of("x"))
        assert reply is not None
        assert reply.payload == [Item(1, "a")]

    @respx.mock
    def test_expected_type_from_callable(self) -> None:
        respx.get(TARGET).mock(return_value=httpx.Response(200, json={"id": 2, "name": "b"}))
        handler = _gateway()
        handler.set_expected_response_type(lambda m: m.headers["responseType"])
        reply = handler.handle_message(Message.of("x", {"responseType": Item}))
        assert reply is not None
        assert reply.payload == Item(2, "b")

    @respx.mock
    def test_uri_from_callable(self) -> None:
        route = respx.get("http://example.org/dynamic").mock(return_value=httpx.Response(200, text="ok"))
        handler = _gateway(lambda m: f"http://example.org/{m.payload}")
        handler.handle_message(Message.of("dynamic"))
        assert route.called

    def test_uri_callable_must_return_url(self) -> None:
        handler = _gateway(lambda m: 42)
        with pytest.raises(IllegalStateError):
            handler.handle_message(Message.of("x"))

    @respx.mock
    def test_post_sends_json_payload_and_mapped_headers(self) -> None:
        route = respx.post(TARGET).mock(return_value=httpx.Response(201, json={"id": 3, "name": "new"}))
        handler = HttpRequestExecutingMessageHandler(TARGET)
        handler.set_expected_response_type(Item)
        reply = handler.handle_message(Message.of({"name": "new"}, {"Authorization": "Bearer t", "orderId": 9}))
        sent = route.calls.last.request
        assert json.loads(sent.content) == {"name": "new"}
        assert sent.headers["content-type"] == "application/json"
        assert sent.headers["authorization"] == "Bearer t"
        assert "orderid" not in sent.headers
        assert reply is not None
        assert reply.payload == Item(3, "new")
        assert reply.headers[STATUS_CODE] == HTTPStatus.CREATED
        assert reply.headers["contentType"] == "application/json"

    @respx.mock
    def test_string_payload_sent_as_text(self) -> None:
        route = respx.put(TARGET).mock(return_value=httpx.Response(204))
        handler = HttpRequestExecutingMessageHandler(TARGET, expect_reply=False)
        handler.set_http_method("put")
        handler.handle_message(Message.of("plain text"))
        sent = route.calls.last.request
        assert sent.content == b"plain text"
        assert sent.headers["content-type"] == "text/plain;charset=UTF-8"

    @respx.mock
    def test_http_entity_payload_used_as_is(self) -> None:
        route = respx.post(TARGET).mock(return_value=httpx.Response(200))
        handler = HttpRequestExecutingMessageHandler(TARGET, expect_reply=False)
        entity = HttpEntity(b"\x00\x01", {"Content-Type": "application/x-custom", "X-Sig": "s"})
        handler.handle_message(Message.of(entity))
        sent = route.calls.last.request
        assert sent.content == b"\x00\x01"
        assert sent.headers["x-sig"] == "s"
        assert sent.headers["content-type"] == "application/x-custom"

    @respx.mock
    def test_http_method_from_callable(self) -> None:
        route = respx.delete(TARGET).mock(return_value=httpx.Response(204))
        handler = HttpRequestExecutingMessageHandler(TARGET, expect_reply=False)
        handler.set_http_method(lambda m: m.headers["method"])
        handler.handle_message(Message.of("x", {"method": "DELETE"}))
        assert route.called

    @respx.mock
    def test_transfer_cookies(self) -> None:
        respx.get(TARGET).mock(
            return_value=httpx.Response(200, text="ok", headers={"Set-Cookie": "session=abc"})
        )
        handler = _gateway()
        handler.set_transfer_cookies(True)
        reply = handler.handle_message(Message.of("x"))
        assert reply is not None
        assert reply.headers["Cookie"] == "session=abc"
        assert "set-cookie" not in reply.headers


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    @respx.mock
    @pytest.mark.parametrize("client", [None, *_clients()])
    def test_connection_refused_is_wrapped(self, client: Any) -> None:
        respx.get(TARGET).mock(side_effect=httpx.ConnectError("Connection refused"))
        handler = _gateway(client=client)
        handler.component_name = "ordersGateway"
        message = Message.of("ping")
        with pytest.raises(MessageHandlingError) as exc_info:
            handler.handle_message(message)
        err = exc_info.value
        assert err.failed_message is message
        assert TARGET in err.message
        assert "ordersGateway" in err.message
        assert isinstance(err.__cause__, ResourceAccessError)
        assert isinstance(err.__cause__.__cause__, httpx.ConnectError)

    @respx.mock
    @pytest.mark.parametrize("client", [None, *_clients()])
    def test_error_status_is_wrapped(self, client: Any) -> None:
        respx.get(TARGET).mock(return_value=httpx.Response(404))
        handler = _gateway(client=client)
        with pytest.raises(MessageHandlingError) as exc_info:
            handler.handle_message(Message.of("ping"))
        assert isinstance(exc_info.value.cause, HttpClientErrorError)
        assert exc_info.value.cause.status_code == 404

    @respx.mock
    @pytest.mark.parametrize("owner", ["handler", "template"])
    def test_raise_for_status_error_handler_is_wrapped(self, owner: str) -> None:
        respx.get(TARGET).mock(return_value=httpx.Response(503, text="unavailable"))
        if owner == "handler":
            handler = _gateway()
            handler.set_error_handler(RaiseForStatusErrorHandler())
        else:
            handler = _gateway(client=HttpTemplate(error_handler=RaiseForStatusErrorHandler()))
        with pytest.raises(MessageHandlingError) as exc_info:
            handler.handle_message(Message.of("x"))
        cause = exc_info.value.cause
        assert isinstance(cause, HttpServerErrorError)
        assert cause.status_code == 503
        assert isinstance(cause.__cause__, httpx.HTTPStatusError)

    @respx.mock
    def test_failing_error_handler_is_wrapped(self) -> None:
        respx.get(TARGET).mock(return_value=httpx.Response(200, text="ok"))
        handler = _gateway()
        handler.set_error_handler(BrokenErrorHandler())
        with pytest.raises(MessageHandlingError) as exc_info:
            handler.handle_message(Message.of("x"))
        cause = exc_info.value.cause
        assert isinstance(cause, RestClientResponseError)
        assert isinstance(cause.__cause__, RuntimeError)

    @respx.mock
    def test_failing_converter_read_is_wrapped(self) -> None:
        respx.get(TARGET).mock(return_value=httpx.Response(200, text="ok"))
        handler = _gateway()
        handler.set_message_converters([BrokenConverter()])
        with pytest.raises(MessageHandlingError) as exc_info:
            handler.handle_message(Message.of("x"))
        assert isinstance(exc_info.value.cause, ConversionError)
        assert isinstance(exc_info.value.cause.__cause__, KeyError)

    def test_failing_converter_write_is_wrapped(self) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET, expect_reply=False)
        handler.set_message_converters([BrokenConverter()])
        with respx.mock(assert_all_called=False) as mock:
            route = mock.post(TARGET)
            with pytest.raises(MessageHandlingError) as exc_info:
                handler.handle_message(Message.of("body"))
            assert not route.called
        assert isinstance(exc_info.value.cause, ConversionError)

    @respx.mock
    def test_undecodable_form_body_is_wrapped(self) -> None:
        respx.get(TARGET).mock(
            return_value=httpx.Response(
                200, content=b"a=\xff\xfe", headers={"Content-Type": "application/x-www-form-urlencoded"}
            )
        )
        handler = _gateway()
        handler.set_expected_response_type(dict)
        with pytest.raises(MessageHandlingError) as exc_info:
            handler.handle_message(Message.of("x"))
        assert isinstance(exc_info.value.cause, ConversionError)
        assert isinstance(exc_info.value.cause.__cause__, UnicodeDecodeError)

    @respx.mock
    def test_conversion_failure_is_wrapped(self) -> None:
        respx.get(TARGET).mock(return_value=httpx.Response(200, json={"unexpected": True}))
        handler = _gateway()
        handler.set_expected_response_type(Item)
        with pytest.raises(MessageHandlingError):
            handler.handle_message(Message.of("x"))

    @pytest.mark.parametrize("client", [None, *_clients()])
    def test_unsupported_response_type_not_wrapped(self, client: Any) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET, client)
        with respx.mock(assert_all_called=False) as mock:
            route = mock.get(TARGET)
            with pytest.raises(UnsupportedResponseTypeError) as exc_info:
                handler.exchange(
                    TARGET, HttpMethod.GET, HttpEntity(), object(), Message.of("x"), {}
                )
            assert not route.called
        assert isinstance(exc_info.value, IllegalArgumentError)
        assert not isinstance(exc_info.value, MessageHandlingError)

    def test_unsupported_response_type_rejected_by_setter(self) -> None:
        with pytest.raises(UnsupportedResponseTypeError):
            HttpRequestExecutingMessageHandler(TARGET).set_expected_response_type(42)

    def test_missing_uri_variable_not_wrapped(self) -> None:
        handler = _gateway("http://example.org/items/{id}")
        with pytest.raises(IllegalArgumentError, match="'id'"):
            handler.handle_message(Message.of("x"))

    @respx.mock
    def test_failure_is_logged(self) -> None:
        respx.get(TARGET).mock(side_effect=httpx.ConnectError("Connection refused"))
        handler = _gateway()
        with capture_logs() as logs, pytest.raises(MessageHandlingError):
            handler.handle_message(Message.of("x"))
        failures = [e for e in logs if e["event"] == "http.exchange_failed"]
        assert len(failures) == 1
        assert failures[0]["uri"] == TARGET
        assert failures[0]["log_level"] == "warning"


class TestClose:
    def test_close_owned_client(self) -> None:
        handler = HttpRequestExecutingMessageHandler(TARGET)
        handler.initialize()
        client = handler.client._accessor._http_client()
        assert not client.is_closed
        handler.close()
        assert client.is_closed

    def test_close_leaves_external_client_open(self) -> None:
        template = HttpTemplate()
        client = template._http_client()
        handler = HttpRequestExecutingMessageHandler(TARGET, template)
        handler.initialize()
        handler.close()
        assert not client.is_closed
        template.close()
