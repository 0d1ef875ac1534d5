"""Config validation – errors raised while loading or checking settings.

Secrets (``aws_secret_access_key`` and friends) never end up in the message:
callers pass ``value=None`` for them and only the setting name is reported.
"""
from __future__ import annotations

from typing import Any

from dynamo_eventstore.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Settings could not be loaded or a component was wired incorrectly."""

    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str, **kwargs: Any) -> None:
        super().__init__(f"setting '{setting_name}' is required but not set", **kwargs)
        self.setting_name = setting_name
        self.detail.setdefault("setting", setting_name)


class InvalidSettingValueError(ConfigError):
    """A setting is present but unusable (bad type, empty, out of range)."""

    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str, **kwargs: Any) -> None:
        shown = "" if value is None else f" {value!r}"
        super().__init__(f"setting '{setting_name}'{shown} is invalid: {reason}", **kwargs)
        self.setting_name = setting_name
        self.value = value
        self.reason = reason
        self.detail.setdefault("setting", setting_name)


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
