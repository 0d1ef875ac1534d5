"""DynamoDB adapter — TableLifecycle.

Creates and deletes tables and blocks on DynamoDB's ``table_exists`` /
``table_not_exists`` waiters. The event table's key schema is the durable
schema of the store::

    AggregateID  (HASH,  S)
    Version      (RANGE, N)
"""

from __future__ import annotations

import dataclasses
from typing import Any, Sequence

from botocore.exceptions import ClientError, WaiterError

from dynamo_eventstore.adapters.dynamodb.client import (
    RESOURCE_IN_USE,
    RESOURCE_NOT_FOUND,
    call,
    client_error_code,
    storage_error,
)
from dynamo_eventstore.application.event_sourcing.codec import ATTR_AGGREGATE_ID, ATTR_VERSION
from dynamo_eventstore.application.event_sourcing.errors import TableNotReadyError
from dynamo_eventstore.observability.logging import get_logger
from dynamo_eventstore.resilience.deadline import Deadline, deadline_aware

_log = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class KeyAttribute:
    """One element of a table's primary key."""

    name: str
    key_type: str
    """``"HASH"`` or ``"RANGE"``."""
    attribute_type: str
    """``"S"``, ``"N"`` or ``"B"``."""


EVENT_TABLE_KEYS: tuple[KeyAttribute, ...] = (
    KeyAttribute(ATTR_AGGREGATE_ID, "HASH", "S"),
    KeyAttribute(ATTR_VERSION, "RANGE", "N"),
)


class TableLifecycle:
    """Create / delete tables and wait for DynamoDB to confirm."""

    def __init__(self, client: Any, *, waiter_delay: int = 1, waiter_max_attempts: int = 25) -> None:
        self._client = client
        self._waiter_config = {"Delay": waiter_delay, "MaxAttempts": waiter_max_attempts}

    async def create_table(
        self,
        table_name: str,
        *,
        namespace: str,
        keys: Sequence[KeyAttribute] = EVENT_TABLE_KEYS,
        deadline: Deadline | None = None,
    ) -> None:
        """Create *table_name* (on-demand billing) and wait until it is ACTIVE.

        An already existing table is accepted as is.
        """
        try:
            await call(
                self._client.create_table,
                deadline=deadline,
                namespace=namespace,
                TableName=table_name,
                KeySchema=[{"AttributeName": k.name, "KeyType": k.key_type} for k in keys],
                AttributeDefinitions=[
                    {"AttributeName": k.name, "AttributeType": k.attribute_type} for k in keys
                ],
                BillingMode="PAY_PER_REQUEST",
            )
            _log.info("table.creating", table=table_name, namespace=namespace)
        except ClientError as exc:
            if client_error_code(exc) != RESOURCE_IN_USE:
                raise storage_error(
                    exc, namespace=namespace, operation="CreateTable", table=table_name
                ) from exc
            _log.info("table.already_exists", table=table_name, namespace=namespace)

        await self._wait("table_exists", table_name, namespace=namespace, deadline=deadline)
        _log.info("table.ready", table=table_name, namespace=namespace)

    async def delete_table(
        self,
        table_name: str,
        *,
        namespace: str,
        deadline: Deadline | None = None,
    ) -> None:
        """Delete *table_name* and wait until it is gone; a missing table is success."""
        try:
            await call(
                self._client.delete_table,
                deadline=deadline,
                namespace=namespace,
                TableName=table_name,
            )
        except ClientError as exc:
            if client_error_code(exc) == RESOURCE_NOT_FOUND:
                _log.info("table.already_deleted", table=table_name, namespace=namespace)
                return
            raise storage_error(
                exc, namespace=namespace, operation="DeleteTable", table=table_name
            ) from exc

        await self._wait("table_not_exists", table_name, namespace=namespace, deadline=deadline)
        _log.info("table.deleted", table=table_name, namespace=namespace)

    async def table_exists(
        self,
        table_name: str,
        *,
        namespace: str,
        deadline: Deadline | None = None,
    ) -> bool:
        try:
            await call(
                self._client.describe_table,
                deadline=deadline,
                namespace=namespace,
                TableName=table_name,
            )
        except ClientError as exc:
            if client_error_code(exc) == RESOURCE_NOT_FOUND:
                return False
            raise storage_error(
                exc, namespace=namespace, operation="DescribeTable", table=table_name
            ) from exc
        return True

    async def _wait(
        self,
        waiter_name: str,
        table_name: str,
        *,
        namespace: str,
        deadline: Deadline | None,
    ) -> None:
        waiter = self._client.get_waiter(waiter_name)
        try:
            await deadline_aware(
                waiter.wait(TableName=table_name, WaiterConfig=self._waiter_config),
                deadline,
                namespace=namespace,
                operation=waiter_name,
                table=table_name,
            )
        except WaiterError as exc:
            _log.warning("table.wait_failed", table=table_name, waiter=waiter_name, namespace=namespace)
            raise TableNotReadyError(
                f"table '{table_name}' did not reach state '{waiter_name}': {exc}",
                namespace=namespace,
                detail={"table": table_name, "waiter": waiter_name},
                cause=exc,
            ) from exc


__all__ = ["EVENT_TABLE_KEYS", "KeyAttribute", "TableLifecycle"]
