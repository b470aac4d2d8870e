"""Unit tests – FluentHttpClient (builder-configured fluent client)."""
from __future__ import annotations

import dataclasses

import httpx
import pytest
import respx

from mp_integration.adapters.http import (
    EncodingMode,
    FluentHttpClient,
    HttpServerErrorError,
    HttpTemplate,
    NoOpResponseErrorHandler,
    StringHttpMessageConverter,
    TypeReference,
    UnknownContentTypeError,
    UriTemplateHandler,
)
from mp_integration.kernel.errors import IllegalArgumentError, IllegalStateError


@dataclasses.dataclass
class Item:
    id: int


class TestRequestSpec:
    @respx.mock
    def test_uri_template_with_keyword_variables(self) -> None:
        route = respx.get("http://svc/items/5").mock(return_value=httpx.Response(200, json={"id": 5}))
        client = FluentHttpClient.builder().build()
        entity = client.get().uri("http://svc/items/{id}", id=5).retrieve().to_entity(Item)
        assert route.called
        assert entity.body == Item(5)

    @respx.mock
    def test_headers_and_body(self) -> None:
        route = respx.post("http://svc/items").mock(return_value=httpx.Response(201))
        client = FluentHttpClient.builder().default_header("User-Agent", "mp-integration").build()
        entity = (
            client.post()
            .uri(httpx.URL("http://svc/items"))
            .header("X-Trace", "t-1")
            .headers(lambda headers: headers.update({"X-Tenant": "acme"}))
            .content_type("text/plain")
            .body("payload")
            .retrieve()
            .to_bodiless_entity()
        )
        sent = route.calls.last.request
        assert sent.headers["x-trace"] == "t-1"
        assert sent.headers["x-tenant"] == "acme"
        assert sent.headers["user-agent"] == "mp-integration"
        assert sent.content == b"payload"
        assert entity.status_code == 201

    @respx.mock
    def test_header_replaces_previous_values(self) -> None:
        route = respx.get("http://svc/h").mock(return_value=httpx.Response(200))
        client = FluentHttpClient.builder().build()
        client.get().uri("http://svc/h").header("Accept", "a/b").header("Accept", "c/d", "e/f").retrieve().to_bodiless_entity()
        assert route.calls.last.request.headers.get_list("accept") == ["c/d", "e/f"]

    @respx.mock
    def test_no_body_attached_when_not_set(self) -> None:
        route = respx.get("http://svc/x").mock(return_value=httpx.Response(200))
        FluentHttpClient.builder().build().get().uri("http://svc/x").retrieve().to_bodiless_entity()
        sent = route.calls.last.request
        assert sent.content == b""
        assert "content-type" not in sent.headers

    def test_retrieve_without_uri(self) -> None:
        with pytest.raises(IllegalStateError):
            FluentHttpClient.builder().build().get().retrieve().to_bodiless_entity()

    def test_unknown_method(self) -> None:
        with pytest.raises(IllegalArgumentError):
            FluentHttpClient.builder().build().method("BREW")


class TestResponseSpec:
    @respx.mock
    def test_bodiless_entity_ignores_payload(self) -> None:
        respx.get("http://svc/x").mock(return_value=httpx.Response(200, text="something"))
        entity = FluentHttpClient.builder().build().get().uri("http://svc/x").retrieve().to_bodiless_entity()
        assert entity.body is None
        assert entity.status_code == 200

    @respx.mock
    def test_generic_entity(self) -> None:
        respx.get("http://svc/items").mock(return_value=httpx.Response(200, json=[{"id": 1}]))
        client = FluentHttpClient.builder().build()
        assert client.get().uri("http://svc/items").retrieve().to_entity(TypeReference(list[Item])).body == [Item(1)]

    @respx.mock
    def test_body_shortcut(self) -> None:
        respx.get("http://svc/n").mock(return_value=httpx.Response(200, json={"n": 1}))
        client = FluentHttpClient.builder().build()
        assert client.get().uri("http://svc/n").retrieve().body(dict[str, int]) == {"n": 1}


class TestBuilder:
    @respx.mock
    def test_base_url(self) -> None:
        route = respx.get("http://svc/api/items/1").mock(return_value=httpx.Response(200))
        client = FluentHttpClient.builder().base_url("http://svc/api/").build()
        client.get().uri("items/{id}", {"id": 1}).retrieve().to_bodiless_entity()
        assert route.called

    @respx.mock
    def test_default_status_handler(self) -> None:
        respx.get("http://svc/err").mock(return_value=httpx.Response(500, text="boom"))
        client = FluentHttpClient.builder().default_status_handler(NoOpResponseErrorHandler()).build()
        entity = client.get().uri("http://svc/err").retrieve().to_entity(str)
        assert entity.status_code == 500

    @respx.mock
    def test_default_error_handler_raises(self) -> None:
        respx.get("http://svc/err").mock(return_value=httpx.Response(502))
        with pytest.raises(HttpServerErrorError):
            FluentHttpClient.builder().build().get().uri("http://svc/err").retrieve().to_bodiless_entity()

    @respx.mock
    def test_message_converters_replace_defaults(self) -> None:
        respx.get("http://svc/j").mock(return_value=httpx.Response(200, json={"id": 1}))
        client = FluentHttpClient.builder().message_converters([StringHttpMessageConverter()]).build()
        with pytest.raises(UnknownContentTypeError):
            client.get().uri("http://svc/j").retrieve().to_entity(Item)

    def test_message_converters_callable_edits_defaults(self) -> None:
        builder = FluentHttpClient.builder().message_converters(lambda converters: converters.pop(0))
        accessor = builder.build()._accessor
        assert [type(c).__name__ for c in accessor.message_converters][0] == "StringHttpMessageConverter"

    def test_uri_builder_factory(self) -> None:
        handler = UriTemplateHandler(EncodingMode.URI_COMPONENT)
        client = FluentHttpClient.builder().uri_builder_factory(handler).build()
        assert client._accessor.uri_template_handler is handler


class TestCreate:
    @respx.mock
    def test_shares_template_configuration(self) -> None:
        respx.get("http://svc/err").mock(return_value=httpx.Response(500))
        template = HttpTemplate(error_handler=NoOpResponseErrorHandler())
        client = FluentHttpClient.create(template)
        assert client.get().uri("http://svc/err").retrieve().to_bodiless_entity().status_code == 500
