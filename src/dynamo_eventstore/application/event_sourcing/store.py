"""Application event sourcing – EventStore port and InMemoryEventStore."""

from __future__ import annotations

import abc
import dataclasses
from typing import Sequence

from dynamo_eventstore.application.event_sourcing.codec import EventCodec
from dynamo_eventstore.application.event_sourcing.errors import (
    AggregateNotFoundError,
    ConcurrencyConflictError,
    EventHandlerError,
    EventNotFoundError,
)
from dynamo_eventstore.application.event_sourcing.handler import EventHandler
from dynamo_eventstore.application.event_sourcing.record import EventRecord
from dynamo_eventstore.application.event_sourcing.registry import EventDataRegistry
from dynamo_eventstore.application.event_sourcing.sequencer import VersionSequencer
from dynamo_eventstore.kernel.ddd.event import Event
from dynamo_eventstore.kernel.ddd.namespace import DEFAULT_NAMESPACE, resolve_namespace
from dynamo_eventstore.kernel.types.ids import EntityId


class EventStore(abc.ABC):
    """Port — durable append-only event store.

    ``original_version`` drives **optimistic concurrency control**:

    - Pass ``0`` when creating a new stream.
    - Pass the version of the last event you loaded when appending.
    - Event ``i`` of the batch (0-based) must carry version
      ``original_version + i + 1``.

    Every operation takes an optional ``namespace``; when omitted the ambient
    :class:`~dynamo_eventstore.kernel.ddd.namespace.NamespaceContext` value
    (or ``"default"``) is used.
    """

    @abc.abstractmethod
    async def save(
        self,
        events: Sequence[Event],
        original_version: int,
        *,
        namespace: str | None = None,
    ) -> None:
        """Append *events* to their aggregate's stream."""

    @abc.abstractmethod
    async def load(
        self,
        aggregate_id: EntityId | str,
        *,
        namespace: str | None = None,
    ) -> list[Event]:
        """Return the aggregate's events ordered by version (``[]`` if none)."""

    @abc.abstractmethod
    async def load_all(self, *, namespace: str | None = None) -> list[Event]:
        """Return every stored event in the namespace (unordered across aggregates)."""

    @abc.abstractmethod
    async def replace(self, event: Event, *, namespace: str | None = None) -> None:
        """Overwrite the stored event at ``(event.aggregate_id, event.version)``."""

    @abc.abstractmethod
    async def rename_event(
        self,
        from_type: str,
        to_type: str,
        *,
        namespace: str | None = None,
    ) -> int:
        """Re-tag every event of type *from_type*; return how many were renamed."""


class InMemoryEventStore(EventStore):
    """In-memory :class:`EventStore` for tests and local development.

    Records go through the same :class:`EventCodec` as the DynamoDB store,
    so payloads that would fail to encode there fail here too.
    """

    def __init__(
        self,
        registry: EventDataRegistry | None = None,
        *,
        event_handler: EventHandler | None = None,
        default_namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._codec = EventCodec(registry or EventDataRegistry())
        self._sequencer = VersionSequencer()
        self._handler = event_handler
        self._default_namespace = default_namespace
        # namespace → aggregate id → version → record; one slot per version,
        # mirroring the conditional put on (AggregateID, Version)
        self._streams: dict[str, dict[str, dict[int, EventRecord]]] = {}

    async def save(
        self,
        events: Sequence[Event],
        original_version: int,
        *,
        namespace: str | None = None,
    ) -> None:
        ns = resolve_namespace(namespace, self._default_namespace)
        ordered = self._sequencer.validate(events, original_version, namespace=ns)
        streams = self._streams.setdefault(ns, {})
        for event in ordered:
            record = self._codec.encode(event, namespace=ns)
            stream = streams.setdefault(record.aggregate_id, {})
            if record.version in stream:
                raise ConcurrencyConflictError(record.aggregate_id, record.version, namespace=ns)
            stream[record.version] = record

        if self._handler is not None:
            for event in ordered:
                try:
                    await self._handler.handle_event(event)
                except Exception as exc:
                    raise EventHandlerError(event, namespace=ns, cause=exc) from exc

    async def load(
        self,
        aggregate_id: EntityId | str,
        *,
        namespace: str | None = None,
    ) -> list[Event]:
        ns = resolve_namespace(namespace, self._default_namespace)
        stream = self._streams.get(ns, {}).get(str(aggregate_id), {})
        return [self._codec.decode(stream[v], namespace=ns) for v in sorted(stream)]

    async def load_all(self, *, namespace: str | None = None) -> list[Event]:
        ns = resolve_namespace(namespace, self._default_namespace)
        return [
            self._codec.decode(r, namespace=ns)
            for stream in self._streams.get(ns, {}).values()
            for r in stream.values()
        ]

    async def replace(self, event: Event, *, namespace: str | None = None) -> None:
        ns = resolve_namespace(namespace, self._default_namespace)
        aggregate_id = str(event.aggregate_id)
        stream = self._streams.get(ns, {}).get(aggregate_id)
        if not stream:
            raise AggregateNotFoundError(aggregate_id, namespace=ns)
        record = self._codec.encode(event, namespace=ns)
        if record.version not in stream:
            raise EventNotFoundError(aggregate_id, record.version, namespace=ns)
        stream[record.version] = record

    async def rename_event(
        self,
        from_type: str,
        to_type: str,
        *,
        namespace: str | None = None,
    ) -> int:
        ns = resolve_namespace(namespace, self._default_namespace)
        renamed = 0
        for stream in self._streams.get(ns, {}).values():
            for version, record in stream.items():
                if record.event_type == from_type:
                    stream[version] = dataclasses.replace(record, event_type=to_type)
                    renamed += 1
        return renamed

    def stream_version(self, aggregate_id: EntityId | str, *, namespace: str | None = None) -> int:
        """Return the highest stored version for *aggregate_id* (``0`` if none)."""
        ns = resolve_namespace(namespace, self._default_namespace)
        return max(self._streams.get(ns, {}).get(str(aggregate_id), {}), default=0)


__all__ = ["EventStore", "InMemoryEventStore"]
