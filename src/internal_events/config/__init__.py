"""Config – 12-factor settings and loaders."""

from internal_events.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    InternalEventsSettings,
    Settings,
    SettingsLoader,
)
from internal_events.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InternalEventsSettings",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
]
