"""Config settings – 12-factor env-based configuration."""
from internal_events.config.settings.base import Settings
from internal_events.config.settings.internal_events import InternalEventsSettings
from internal_events.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InternalEventsSettings",
    "Settings",
    "SettingsLoader",
]
