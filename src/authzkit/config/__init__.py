"""Config – engine settings, loaders and validation errors."""

from authzkit.config.settings import AuthzSettings, DotenvSettingsLoader, EnvSettingsLoader, Settings, SettingsLoader
from authzkit.config.validation import ConfigError, InvalidSettingValueError, MissingRequiredSettingError

__all__ = [
    "AuthzSettings",
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
]
