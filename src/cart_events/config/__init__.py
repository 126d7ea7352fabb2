"""Config – 12-factor settings for the event pipeline."""
from cart_events.config.pipeline import PipelineSettings
from cart_events.config.settings import DotenvSettingsLoader, EnvSettingsLoader, Settings, SettingsLoader
from cart_events.config.validation import ConfigError, InvalidSettingValueError, MissingRequiredSettingError

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "PipelineSettings",
    "Settings",
    "SettingsLoader",
]
