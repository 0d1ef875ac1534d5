"""Config settings – EventStoreSettings."""
from __future__ import annotations

import dataclasses

from dynamo_eventstore.config.settings.base import Settings
from dynamo_eventstore.config.validation import InvalidSettingValueError
from dynamo_eventstore.kernel.ddd.namespace import DEFAULT_NAMESPACE


@dataclasses.dataclass
class EventStoreSettings(Settings):
    """Connection and table-routing settings, read from ``EVENTSTORE_*``.

    The defaults target DynamoDB Local on ``localhost:8000``.
    """

    _prefix = "eventstore"

    table_prefix: str = "eventhorizonEvents"
    region_name: str = "us-west-2"
    endpoint_url: str | None = "http://localhost:8000"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    use_prefix_as_table_name: bool = False
    default_namespace: str = DEFAULT_NAMESPACE
    waiter_delay: int = 1
    waiter_max_attempts: int = 25

    def _validate(self) -> None:
        if not self.table_prefix:
            raise InvalidSettingValueError("table_prefix", self.table_prefix, "must not be empty")
        if not self.default_namespace:
            raise InvalidSettingValueError(
                "default_namespace", self.default_namespace, "must not be empty"
            )
        if self.waiter_delay <= 0:
            raise InvalidSettingValueError("waiter_delay", self.waiter_delay, "must be positive")
        if self.waiter_max_attempts <= 0:
            raise InvalidSettingValueError(
                "waiter_max_attempts", self.waiter_max_attempts, "must be positive"
            )
        if bool(self.aws_access_key_id) != bool(self.aws_secret_access_key):
            raise InvalidSettingValueError(
                "aws_secret_access_key",
                None,
                "access key id and secret access key must be set together",
            )


__all__ = ["EventStoreSettings"]
