"""HTTP adapter – URI template expansion and encoding."""
from __future__ import annotations

import enum
import re
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote

import httpx

from mp_integration.kernel.errors import IllegalArgumentError

_VARIABLE = re.compile(r"\{([^{}]+)\}")

# Characters legal anywhere in a URI (RFC 3986 reserved + unreserved) plus '%'
# so that already-encoded octets survive.
_URI_SAFE = "!#$&'()*+,/:;=?@[]~%-._"
_STRICT_SAFE = "-._~"


class EncodingMode(enum.Enum):
    """How template text and variable values are percent-encoded."""

    TEMPLATE_AND_VALUES = "template_and_values"
    """Encode illegal characters in the template and every reserved character in values."""

    VALUES_ONLY = "values_only"
    """Leave the template as is and strictly encode variable values."""

    URI_COMPONENT = "uri_component"
    """Expand first, then encode only characters illegal in a URI."""

    NONE = "none"
    """No encoding is applied."""


def _encode_illegal(text: str, *, keep_braces: bool = False) -> str:
    return quote(text, safe=_URI_SAFE + ("{}" if keep_braces else ""))


def _encode_strict(text: str) -> str:
    return quote(text, safe=_STRICT_SAFE)


def _identity(text: str) -> str:
    return text


class UriTemplateHandler:
    """Expand ``{name}`` / ``{name:regex}`` templates into :class:`httpx.URL` objects.

    Variables missing from the map are an error; extra variables are ignored.
    A relative template is resolved against *base_url* when one is configured.
    """

    def __init__(
        self,
        encoding_mode: EncodingMode = EncodingMode.TEMPLATE_AND_VALUES,
        base_url: str | None = None,
    ) -> None:
        self.encoding_mode = encoding_mode
        self.base_url = base_url

    def expand(self, template: str, uri_variables: Mapping[str, Any] | None = None) -> httpx.URL:
        variables = uri_variables or {}
        mode = self.encoding_mode
        if mode is EncodingMode.TEMPLATE_AND_VALUES:
            uri = self._substitute(_encode_illegal(template, keep_braces=True), variables, _encode_strict)
        elif mode is EncodingMode.VALUES_ONLY:
            uri = self._substitute(template, variables, _encode_strict)
        elif mode is EncodingMode.URI_COMPONENT:
            uri = _encode_illegal(self._substitute(template, variables, _identity))
        else:
            uri = self._substitute(template, variables, _identity)
        return self._resolve(uri)

    def _resolve(self, uri: str) -> httpx.URL:
        try:
            url = httpx.URL(uri)
            if self.base_url and url.is_relative_url:
                url = httpx.URL(self.base_url).join(url)
        except httpx.InvalidURL as exc:
            raise IllegalArgumentError(f"Invalid URI [{uri}]: {exc}", cause=exc) from exc
        return url

    @staticmethod
    def _substitute(
        template: str,
        variables: Mapping[str, Any],
        encode_value: Callable[[str], str],
    ) -> str:
        def replace(match: re.Match[str]) -> str:
            name = match.group(1).split(":", 1)[0].strip()
            if name not in variables:
                raise IllegalArgumentError(f"Map has no value for '{name}'")
            value = variables[name]
            return encode_value("" if value is None else str(value))

        return _VARIABLE.sub(replace, template)

    def __repr__(self) -> str:
        return f"UriTemplateHandler(encoding_mode={self.encoding_mode.name}, base_url={self.base_url!r})"


__all__ = ["EncodingMode", "UriTemplateHandler"]
