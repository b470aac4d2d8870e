"""HTTP adapter – message converters between Python objects and HTTP bodies."""
from __future__ import annotations

import abc
import functools
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs, urlencode

import pydantic
import pydantic_core

from mp_integration.adapters.http.errors import ConversionError

TEXT_PLAIN_UTF8 = "text/plain;charset=UTF-8"
APPLICATION_JSON = "application/json"
APPLICATION_OCTET_STREAM = "application/octet-stream"
APPLICATION_FORM_URLENCODED = "application/x-www-form-urlencoded"


def mime_type(content_type: str | None) -> str | None:
    """``'application/json; charset=utf-8'`` -> ``'application/json'``."""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def charset(content_type: str | None, default: str = "utf-8") -> str:
    for param in (content_type or "").split(";")[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return default


def is_json(content_type: str | None) -> bool:
    mt = mime_type(content_type)
    return mt is None or mt == APPLICATION_JSON or mt.endswith("+json")


class HttpMessageConverter(abc.ABC):
    """Port: read a response body into a type / write a value as a request body."""

    default_content_type: str = APPLICATION_OCTET_STREAM

    @abc.abstractmethod
    def can_read(self, target_type: Any, content_type: str | None) -> bool: ...

    @abc.abstractmethod
    def read(self, target_type: Any, content: bytes, content_type: str | None) -> Any: ...

    @abc.abstractmethod
    def can_write(self, value: Any, content_type: str | None) -> bool: ...

    @abc.abstractmethod
    def write(self, value: Any, content_type: str | None) -> bytes: ...

    def __repr__(self) -> str:
        return type(self).__name__


class BytesHttpMessageConverter(HttpMessageConverter):
    default_content_type = APPLICATION_OCTET_STREAM

    def can_read(self, target_type: Any, content_type: str | None) -> bool:  # noqa: ARG002
        return target_type in (bytes, bytearray)

    def read(self, target_type: Any, content: bytes, content_type: str | None) -> Any:  # noqa: ARG002
        return bytearray(content) if target_type is bytearray else bytes(content)

    def can_write(self, value: Any, content_type: str | None) -> bool:  # noqa: ARG002
        return isinstance(value, bytes | bytearray | memoryview)

    def write(self, value: Any, content_type: str | None) -> bytes:  # noqa: ARG002
        return bytes(value)


class StringHttpMessageConverter(HttpMessageConverter):
    """Reads/writes ``str`` for any content type, honouring the charset parameter."""

    default_content_type = TEXT_PLAIN_UTF8

    def can_read(self, target_type: Any, content_type: str | None) -> bool:  # noqa: ARG002
        return target_type is str

    def read(self, target_type: Any, content: bytes, content_type: str | None) -> Any:  # noqa: ARG002
        try:
            return content.decode(charset(content_type))
        except (LookupError, UnicodeDecodeError) as exc:
            raise ConversionError(f"Could not decode response body: {exc}", cause=exc) from exc

    def can_write(self, value: Any, content_type: str | None) -> bool:  # noqa: ARG002
        return isinstance(value, str)

    def write(self, value: Any, content_type: str | None) -> bytes:
        try:
            return value.encode(charset(content_type))
        except (LookupError, UnicodeEncodeError) as exc:
            raise ConversionError(f"Could not encode request body: {exc}", cause=exc) from exc


class FormHttpMessageConverter(HttpMessageConverter):
    """``application/x-www-form-urlencoded`` <-> ``dict[str, list[str]]``."""

    default_content_type = APPLICATION_FORM_URLENCODED

    def can_read(self, target_type: Any, content_type: str | None) -> bool:
        return target_type is dict and mime_type(content_type) == APPLICATION_FORM_URLENCODED

    def read(self, target_type: Any, content: bytes, content_type: str | None) -> Any:  # noqa: ARG002
        try:
            text = content.decode(charset(content_type))
        except (LookupError, UnicodeDecodeError) as exc:
            raise ConversionError(f"Could not decode form body: {exc}", cause=exc) from exc
        return parse_qs(text, keep_blank_values=True)

    def can_write(self, value: Any, content_type: str | None) -> bool:
        return isinstance(value, Mapping) and mime_type(content_type) == APPLICATION_FORM_URLENCODED

    def write(self, value: Any, content_type: str | None) -> bytes:
        try:
            return urlencode(value, doseq=True).encode(charset(content_type))
        except (LookupError, UnicodeEncodeError, TypeError) as exc:
            raise ConversionError(f"Could not encode form body: {exc}", cause=exc) from exc


@functools.lru_cache(maxsize=256)
def _type_adapter(tp: Any) -> pydantic.TypeAdapter[Any]:
    return pydantic.TypeAdapter(tp)


class JsonHttpMessageConverter(HttpMessageConverter):
    """JSON via pydantic: classes, dataclasses, models and generic aliases alike."""

    default_content_type = APPLICATION_JSON

    def can_read(self, target_type: Any, content_type: str | None) -> bool:  # noqa: ARG002
        return is_json(content_type)

    def read(self, target_type: Any, content: bytes, content_type: str | None) -> Any:  # noqa: ARG002
        try:
            return _type_adapter(target_type).validate_json(content)
        except (pydantic.ValidationError, pydantic.PydanticSchemaGenerationError) as exc:
            raise ConversionError(f"Could not read JSON as {target_type!r}: {exc}", cause=exc) from exc

    def can_write(self, value: Any, content_type: str | None) -> bool:  # noqa: ARG002
        return is_json(content_type)

    def write(self, value: Any, content_type: str | None) -> bytes:  # noqa: ARG002
        try:
            return _type_adapter(type(value)).dump_json(value)
        except (pydantic_core.PydanticSerializationError, pydantic.PydanticSchemaGenerationError) as exc:
            raise ConversionError(f"Could not write {type(value).__name__} as JSON: {exc}", cause=exc) from exc


def default_converters() -> list[HttpMessageConverter]:
    return [
        BytesHttpMessageConverter(),
        StringHttpMessageConverter(),
        FormHttpMessageConverter(),
        JsonHttpMessageConverter(),
    ]


__all__ = [
    "APPLICATION_FORM_URLENCODED",
    "APPLICATION_JSON",
    "APPLICATION_OCTET_STREAM",
    "TEXT_PLAIN_UTF8",
    "BytesHttpMessageConverter",
    "FormHttpMessageConverter",
    "HttpMessageConverter",
    "JsonHttpMessageConverter",
    "StringHttpMessageConverter",
    "charset",
    "default_converters",
    "is_json",
    "mime_type",
]
