"""DynamoDB adapter — ConditionalWriteGate.

The only serialization point of the store is DynamoDB's single-item
conditional write. A batch ``save`` issues one conditional put per event,
so it is **not** atomic: when event N is rejected, events 1..N-1 stay.
"""

from __future__ import annotations

from typing import Any

from botocore.exceptions import ClientError

from dynamo_eventstore.adapters.dynamodb.client import (
    CONDITIONAL_CHECK_FAILED,
    call,
    client_error_code,
    storage_error,
)
from dynamo_eventstore.application.event_sourcing.codec import (
    ATTR_AGGREGATE_ID,
    ATTR_EVENT_TYPE,
    ATTR_VERSION,
)
from dynamo_eventstore.application.event_sourcing.errors import (
    ConcurrencyConflictError,
    EventNotFoundError,
    StorageError,
)
from dynamo_eventstore.resilience.deadline import Deadline

_KEY_NAMES = {"#aid": ATTR_AGGREGATE_ID, "#ver": ATTR_VERSION}
SLOT_IS_EMPTY = "attribute_not_exists(#aid) AND attribute_not_exists(#ver)"
SLOT_IS_TAKEN = "attribute_exists(#aid) AND attribute_exists(#ver)"


class ConditionalWriteGate:
    """Conditional single-item writes against one event table."""

    def __init__(self, client: Any) -> None:
        self._client = client

    async def append_if_absent(
        self,
        table: str,
        item: dict[str, Any],
        *,
        namespace: str,
        deadline: Deadline | None = None,
    ) -> None:
        """Put *item* only if its ``(AggregateID, Version)`` slot is empty.

        Raises :class:`ConcurrencyConflictError` when another writer got there first.
        """
        try:
            await call(
                self._client.put_item,
                deadline=deadline,
                namespace=namespace,
                TableName=table,
                Item=item,
                ConditionExpression=SLOT_IS_EMPTY,
                ExpressionAttributeNames=_KEY_NAMES,
            )
        except ClientError as exc:
            if client_error_code(exc) == CONDITIONAL_CHECK_FAILED:
                aggregate_id, version = _key_of(item)
                raise ConcurrencyConflictError(
                    aggregate_id, version, namespace=namespace, cause=exc
                ) from exc
            raise storage_error(exc, namespace=namespace, operation="PutItem", table=table) from exc

    async def replace_if_present(
        self,
        table: str,
        item: dict[str, Any],
        *,
        namespace: str,
        deadline: Deadline | None = None,
    ) -> None:
        """Overwrite *item* only if its slot already holds a record.

        Raises :class:`EventNotFoundError` when the slot is empty.
        """
        try:
            await call(
                self._client.put_item,
                deadline=deadline,
                namespace=namespace,
                TableName=table,
                Item=item,
                ConditionExpression=SLOT_IS_TAKEN,
                ExpressionAttributeNames=_KEY_NAMES,
            )
        except ClientError as exc:
            if client_error_code(exc) == CONDITIONAL_CHECK_FAILED:
                aggregate_id, version = _key_of(item)
                raise EventNotFoundError(
                    aggregate_id, version, namespace=namespace, cause=exc
                ) from exc
            raise storage_error(exc, namespace=namespace, operation="PutItem", table=table) from exc

    async def rename_if_tagged(
        self,
        table: str,
        aggregate_id: str,
        version: int,
        from_type: str,
        to_type: str,
        *,
        namespace: str,
        deadline: Deadline | None = None,
    ) -> None:
        """Set ``EventType`` to *to_type* while it still equals *from_type*.

        A concurrent change of the tag is reported as :class:`StorageError`.
        """
        try:
            await call(
                self._client.update_item,
                deadline=deadline,
                namespace=namespace,
                TableName=table,
                Key={ATTR_AGGREGATE_ID: {"S": aggregate_id}, ATTR_VERSION: {"N": str(version)}},
                UpdateExpression="SET #type = :to",
                ConditionExpression="#type = :from",
                ExpressionAttributeNames={"#type": ATTR_EVENT_TYPE},
                ExpressionAttributeValues={":from": {"S": from_type}, ":to": {"S": to_type}},
            )
        except ClientError as exc:
            if client_error_code(exc) == CONDITIONAL_CHECK_FAILED:
                raise StorageError(
                    f"event {aggregate_id}@{version} is no longer tagged '{from_type}'",
                    namespace=namespace,
                    detail={"aggregate_id": aggregate_id, "version": version, "table": table},
                    cause=exc,
                ) from exc
            raise storage_error(exc, namespace=namespace, operation="UpdateItem", table=table) from exc


def _key_of(item: dict[str, Any]) -> tuple[str, int]:
    return item[ATTR_AGGREGATE_ID]["S"], int(item[ATTR_VERSION]["N"])


__all__ = ["SLOT_IS_EMPTY", "SLOT_IS_TAKEN", "ConditionalWriteGate"]
