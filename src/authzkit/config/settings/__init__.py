"""Config settings – 12-factor env-based configuration."""
from authzkit.config.settings.base import AuthzSettings, Settings
from authzkit.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = ["AuthzSettings", "DotenvSettingsLoader", "EnvSettingsLoader", "Settings", "SettingsLoader"]
