"""Config settings – env-based configuration of the event store."""
from dynamo_eventstore.config.settings.base import Settings
from dynamo_eventstore.config.settings.eventstore import EventStoreSettings
from dynamo_eventstore.config.settings.loaders import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    SettingsLoader,
)

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "EventStoreSettings",
    "Settings",
    "SettingsLoader",
]
