"""Config – settings loading and configuration errors."""
from mp_integration.config.errors import (
    ClientConfigurationError,
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)
from mp_integration.config.settings import (
    EnvSettingsLoader,
    HttpClientSettings,
    Settings,
    SettingsLoader,
)

__all__ = [
    "ClientConfigurationError",
    "ConfigError",
    "EnvSettingsLoader",
    "HttpClientSettings",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
]
