"""Config – 12-factor settings and loaders."""

from dynamo_eventstore.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    EventStoreSettings,
    Settings,
    SettingsLoader,
)
from dynamo_eventstore.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "EventStoreSettings",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
]
