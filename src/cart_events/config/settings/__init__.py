"""Config settings – 12-factor env-based configuration."""
from cart_events.config.settings.base import Settings
from cart_events.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = ["DotenvSettingsLoader", "EnvSettingsLoader", "Settings", "SettingsLoader"]
