"""Config errors."""
from mp_integration.kernel.errors import IllegalArgumentError


class ConfigError(IllegalArgumentError):
    """Raised when configuration is invalid or loading failed."""
    default_code = "config_error"


class ClientConfigurationError(ConfigError):
    """A transport option was set on a component whose HTTP client is owned by the caller."""
    default_code = "externally_configured_client"

    def __init__(self, option: str, message: str) -> None:
        super().__init__(message, detail={"option": option})
        self.option = option


class MissingRequiredSettingError(ConfigError):
    """A required environment variable / setting is absent."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(f"Required setting '{setting_name}' is missing")
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting's value is present but cannot be used."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(f"Setting '{setting_name}' has invalid value {value!r}: {reason}")
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = [
    "ClientConfigurationError",
    "ConfigError",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
]
