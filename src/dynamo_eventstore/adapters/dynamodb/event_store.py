"""DynamoDB adapter — DynamoEventStore.

One table per namespace, one item per event::

    AggregateID (HASH) | Version (RANGE) | EventType | RawData | Timestamp | AggregateType | Metadata

Optimistic concurrency
~~~~~~~~~~~~~~~~~~~~~~
Each event is written with a conditional put that only succeeds while its
``(AggregateID, Version)`` slot is empty. Two writers racing for the same
slot get exactly one winner; the loser sees
:class:`~dynamo_eventstore.application.event_sourcing.ConcurrencyConflictError`
and must reload and retry. The store never retries by itself.

Partial batches
~~~~~~~~~~~~~~~
DynamoDB has no multi-item conditional batch here, so a ``save`` of N events
is N conditional puts issued in version order. If event k fails (conflict,
encoding, storage, deadline) events 1..k-1 remain persisted and the
downstream handler is not called for any of them.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Sequence

from botocore.exceptions import ClientError

from dynamo_eventstore.adapters.dynamodb.client import (
    RESOURCE_NOT_FOUND,
    client_error_code,
    collect_pages,
    count_pages,
    storage_error,
)
from dynamo_eventstore.adapters.dynamodb.naming import TableNameFn, select_table_name
from dynamo_eventstore.adapters.dynamodb.tables import TableLifecycle
from dynamo_eventstore.adapters.dynamodb.write_gate import ConditionalWriteGate
from dynamo_eventstore.application.event_sourcing.codec import (
    ATTR_AGGREGATE_ID,
    ATTR_EVENT_TYPE,
    ATTR_VERSION,
    EventCodec,
)
from dynamo_eventstore.application.event_sourcing.errors import (
    AggregateNotFoundError,
    ConcurrencyConflictError,
    EventHandlerError,
    EventStoreConfigError,
)
from dynamo_eventstore.application.event_sourcing.handler import EventHandler
from dynamo_eventstore.application.event_sourcing.registry import EventDataRegistry
from dynamo_eventstore.application.event_sourcing.sequencer import VersionSequencer
from dynamo_eventstore.application.event_sourcing.store import EventStore
from dynamo_eventstore.config.settings import EventStoreSettings
from dynamo_eventstore.kernel.ddd.event import Event
from dynamo_eventstore.kernel.ddd.namespace import DEFAULT_NAMESPACE, resolve_namespace
from dynamo_eventstore.kernel.types.ids import EntityId
from dynamo_eventstore.observability.logging import get_logger
from dynamo_eventstore.resilience.deadline import Deadline

_log = get_logger(__name__)


@dataclasses.dataclass
class EventStoreConfig:
    """Everything a :class:`DynamoEventStore` needs, validated once.

    Attributes
    ----------
    client:
        An ``aiobotocore`` DynamoDB client (see ``dynamodb_client``) or any
        object exposing the same coroutine methods.
    registry:
        Type tag → payload class lookup used when decoding.
    table_prefix:
        Prefix of every table name.
    table_name:
        Optional ``(prefix, namespace) -> name`` strategy; overrides
        *use_prefix_as_table_name*.
    use_prefix_as_table_name:
        Route every namespace to the bare prefix.
    event_handler:
        Called once per event after a fully successful ``save``.
    default_namespace:
        Used when neither an explicit nor an ambient namespace is set.
    """

    client: Any
    registry: EventDataRegistry
    table_prefix: str = "eventhorizonEvents"
    table_name: TableNameFn | None = None
    use_prefix_as_table_name: bool = False
    event_handler: EventHandler | None = None
    default_namespace: str = DEFAULT_NAMESPACE
    waiter_delay: int = 1
    waiter_max_attempts: int = 25

    def __post_init__(self) -> None:
        if self.client is None:
            raise EventStoreConfigError("DynamoDB client is not set")
        if self.registry is None:
            raise EventStoreConfigError("event data registry is not set")
        if not self.table_prefix:
            raise EventStoreConfigError("table prefix must not be empty")
        if not self.default_namespace:
            raise EventStoreConfigError("default namespace must not be empty")
        if self.table_name is not None and not callable(self.table_name):
            raise EventStoreConfigError("table_name must be callable (prefix, namespace) -> str")
        if self.event_handler is not None and not callable(
            getattr(self.event_handler, "handle_event", None)
        ):
            raise EventStoreConfigError("event_handler must define handle_event(event)")

    @classmethod
    def from_settings(
        cls,
        settings: EventStoreSettings,
        *,
        client: Any,
        registry: EventDataRegistry,
        **overrides: Any,
    ) -> "EventStoreConfig":
        values: dict[str, Any] = {
            "table_prefix": settings.table_prefix,
            "use_prefix_as_table_name": settings.use_prefix_as_table_name,
            "default_namespace": settings.default_namespace,
            "waiter_delay": settings.waiter_delay,
            "waiter_max_attempts": settings.waiter_max_attempts,
        }
        values.update(overrides)
        return cls(client=client, registry=registry, **values)


class DynamoEventStore(EventStore):
    """Append-only event store on DynamoDB with per-slot optimistic locking.

    Usage::

        async with dynamodb_client(settings) as client:
            store = DynamoEventStore(EventStoreConfig(client=client, registry=registry))
            await store.create_table(namespace="acme")
            await store.save([placed, paid], original_version=0, namespace="acme")
            events = await store.load(order_id, namespace="acme")
    """

    def __init__(self, config: EventStoreConfig) -> None:
        self._config = config
        self._client = config.client
        self._codec = EventCodec(config.registry)
        self._sequencer = VersionSequencer()
        self._gate = ConditionalWriteGate(config.client)
        self._tables = TableLifecycle(
            config.client,
            waiter_delay=config.waiter_delay,
            waiter_max_attempts=config.waiter_max_attempts,
        )
        self._table_name = select_table_name(config.table_name, config.use_prefix_as_table_name)

    @property
    def config(self) -> EventStoreConfig:
        return self._config

    def resolve_namespace(self, namespace: str | None = None) -> str:
        return resolve_namespace(namespace, self._config.default_namespace)

    def resolve_table(self, namespace: str | None = None) -> str:
        """Return the table serving *namespace* (pure, no I/O)."""
        return self._table_name(self._config.table_prefix, self.resolve_namespace(namespace))

    # ------------------------------------------------------------------
    # EventStore interface
    # ------------------------------------------------------------------

    async def save(
        self,
        events: Sequence[Event],
        original_version: int,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        ns = self.resolve_namespace(namespace)
        table = self.resolve_table(ns)
        ordered = self._sequencer.validate(events, original_version, namespace=ns)

        for event in ordered:
            record = self._codec.encode(event, namespace=ns)
            try:
                await self._gate.append_if_absent(
                    table, self._codec.to_item(record), namespace=ns, deadline=deadline
                )
            except ConcurrencyConflictError:
                _log.warning(
                    "event_store.conflict",
                    namespace=ns,
                    table=table,
                    aggregate_id=record.aggregate_id,
                    version=record.version,
                )
                raise

        _log.info(
            "event_store.saved",
            namespace=ns,
            table=table,
            aggregate_id=str(ordered[0].aggregate_id),
            from_version=ordered[0].version,
            to_version=ordered[-1].version,
        )

        handler = self._config.event_handler
        if handler is not None:
            for event in ordered:
                try:
                    await handler.handle_event(event)
                except Exception as exc:
                    raise EventHandlerError(event, namespace=ns, cause=exc) from exc

    async def load(
        self,
        aggregate_id: EntityId | str,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> list[Event]:
        ns = self.resolve_namespace(namespace)
        table = self.resolve_table(ns)
        try:
            items = await collect_pages(
                self._client.query,
                deadline=deadline,
                namespace=ns,
                TableName=table,
                KeyConditionExpression="#aid = :aid",
                ExpressionAttributeNames={"#aid": ATTR_AGGREGATE_ID},
                ExpressionAttributeValues={":aid": {"S": str(aggregate_id)}},
                ScanIndexForward=True,
                ConsistentRead=True,
            )
        except ClientError as exc:
            if client_error_code(exc) == RESOURCE_NOT_FOUND:
                return []
            raise storage_error(exc, namespace=ns, operation="Query", table=table) from exc
        return self._decode_items(items, ns)

    async def load_all(
        self,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> list[Event]:
        ns = self.resolve_namespace(namespace)
        table = self.resolve_table(ns)
        try:
            items = await collect_pages(
                self._client.scan,
                deadline=deadline,
                namespace=ns,
                TableName=table,
                ConsistentRead=True,
            )
        except ClientError as exc:
            raise storage_error(exc, namespace=ns, operation="Scan", table=table) from exc
        return self._decode_items(items, ns)

    async def replace(
        self,
        event: Event,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        ns = self.resolve_namespace(namespace)
        table = self.resolve_table(ns)
        aggregate_id = str(event.aggregate_id)
        try:
            count = await count_pages(
                self._client.query,
                deadline=deadline,
                namespace=ns,
                TableName=table,
                KeyConditionExpression="#aid = :aid",
                ExpressionAttributeNames={"#aid": ATTR_AGGREGATE_ID},
                ExpressionAttributeValues={":aid": {"S": aggregate_id}},
                ConsistentRead=True,
            )
        except ClientError as exc:
            raise storage_error(exc, namespace=ns, operation="Query", table=table) from exc
        if count == 0:
            raise AggregateNotFoundError(aggregate_id, namespace=ns)

        record = self._codec.encode(event, namespace=ns)
        await self._gate.replace_if_present(
            table, self._codec.to_item(record), namespace=ns, deadline=deadline
        )
        _log.info(
            "event_store.replaced",
            namespace=ns,
            table=table,
            aggregate_id=aggregate_id,
            version=record.version,
        )

    async def rename_event(
        self,
        from_type: str,
        to_type: str,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> int:
        """Re-tag all events of type *from_type* as *to_type*.

        Not atomic: a failure part-way leaves some records renamed. Running
        it again is safe, already renamed records no longer match.
        """
        ns = self.resolve_namespace(namespace)
        table = self.resolve_table(ns)
        try:
            items = await collect_pages(
                self._client.scan,
                deadline=deadline,
                namespace=ns,
                TableName=table,
                FilterExpression="#type = :from",
                ProjectionExpression="#aid, #ver",
                ExpressionAttributeNames={
                    "#type": ATTR_EVENT_TYPE,
                    "#aid": ATTR_AGGREGATE_ID,
                    "#ver": ATTR_VERSION,
                },
                ExpressionAttributeValues={":from": {"S": from_type}},
                ConsistentRead=True,
            )
        except ClientError as exc:
            raise storage_error(exc, namespace=ns, operation="Scan", table=table) from exc

        for item in items:
            await self._gate.rename_if_tagged(
                table,
                item[ATTR_AGGREGATE_ID]["S"],
                int(item[ATTR_VERSION]["N"]),
                from_type,
                to_type,
                namespace=ns,
                deadline=deadline,
            )

        _log.info(
            "event_store.renamed",
            namespace=ns,
            table=table,
            from_type=from_type,
            to_type=to_type,
            count=len(items),
        )
        return len(items)

    # ------------------------------------------------------------------
    # Table lifecycle
    # ------------------------------------------------------------------

    async def create_table(
        self,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        ns = self.resolve_namespace(namespace)
        await self._tables.create_table(self.resolve_table(ns), namespace=ns, deadline=deadline)

    async def delete_table(
        self,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        ns = self.resolve_namespace(namespace)
        await self._tables.delete_table(self.resolve_table(ns), namespace=ns, deadline=deadline)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _decode_items(self, items: list[dict[str, Any]], namespace: str) -> list[Event]:
        return [
            self._codec.decode(self._codec.from_item(item, namespace=namespace), namespace=namespace)
            for item in items
        ]


__all__ = ["DynamoEventStore", "EventStoreConfig"]
