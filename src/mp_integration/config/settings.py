"""Config settings – 12-factor env-based configuration for the HTTP client."""
from __future__ import annotations

import abc
import dataclasses
import enum
import os
import typing
from collections.abc import Mapping
from typing import Any, TypeVar

from mp_integration.adapters.http.uri import EncodingMode
from mp_integration.config.errors import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: typing.ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


T = TypeVar("T", bound=Settings)


@dataclasses.dataclass
class HttpClientSettings(Settings):
    """Transport options for an internally built HTTP client.

    Loaded from ``HTTP_CLIENT_*`` variables, e.g. ``HTTP_CLIENT_READ_TIMEOUT=2.5``.
    """

    _prefix: typing.ClassVar[str] = "HTTP_CLIENT"

    connect_timeout: float = 5.0
    read_timeout: float = 30.0
    follow_redirects: bool = False
    max_connections: int = 100
    encoding_mode: EncodingMode = EncodingMode.TEMPLATE_AND_VALUES

    def _validate(self) -> None:
        if self.connect_timeout <= 0:
            raise InvalidSettingValueError("connect_timeout", self.connect_timeout, "must be positive")
        if self.read_timeout <= 0:
            raise InvalidSettingValueError("read_timeout", self.read_timeout, "must be positive")
        if self.max_connections < 1:
            raise InvalidSettingValueError("max_connections", self.max_connections, "must be at least 1")


class SettingsLoader(abc.ABC):
    """Port: load settings from an external source."""

    @abc.abstractmethod
    def load(self, settings_class: type[T]) -> T: ...


class EnvSettingsLoader(SettingsLoader):
    """Load settings from environment variables named ``<PREFIX>_<FIELD>``."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def load(self, settings_class: type[T]) -> T:
        prefix = getattr(settings_class, "_prefix", "").upper()
        hints = typing.get_type_hints(settings_class)
        kwargs: dict[str, Any] = {}

        for field in dataclasses.fields(settings_class):
            env_key = f"{prefix}_{field.name}".upper().lstrip("_")
            raw = self._environ.get(env_key)

            if raw is None:
                if (
                    field.default is dataclasses.MISSING
                    and field.default_factory is dataclasses.MISSING
                ):
                    raise MissingRequiredSettingError(env_key)
                continue

            kwargs[field.name] = self._coerce(env_key, raw, hints[field.name])

        try:
            return settings_class(**kwargs)
        except ConfigError:
            raise
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Failed to load settings: {exc}", cause=exc) from exc

    def _coerce(self, key: str, value: str, type_hint: Any) -> Any:  # noqa: PLR0911
        try:
            if type_hint is bool:
                return value.strip().lower() in ("1", "true", "yes", "on")
            if type_hint is int:
                return int(value)
            if type_hint is float:
                return float(value)
            if isinstance(type_hint, type) and issubclass(type_hint, enum.Enum):
                return type_hint[value.strip().upper()]
        except (KeyError, ValueError) as exc:
            raise InvalidSettingValueError(key, value, f"expected {getattr(type_hint, '__name__', type_hint)}") from exc
        if typing.get_origin(type_hint) is list:
            return [v.strip() for v in value.split(",") if v.strip()]
        return value


__all__ = ["EnvSettingsLoader", "HttpClientSettings", "Settings", "SettingsLoader"]
