"""Application — Event Sourcing."""

from dynamo_eventstore.application.event_sourcing.codec import EventCodec
from dynamo_eventstore.application.event_sourcing.errors import (
    AggregateNotFoundError,
    ConcurrencyConflictError,
    EventDataRegistrationError,
    EventDecodingError,
    EventEncodingError,
    EventHandlerError,
    EventNotFoundError,
    EventStoreConfigError,
    EventStoreError,
    IncorrectVersionError,
    InvalidEventError,
    NoEventsError,
    StorageError,
    TableNotReadyError,
)
from dynamo_eventstore.application.event_sourcing.handler import EventHandler, EventHandlerFunc
from dynamo_eventstore.application.event_sourcing.record import EventRecord
from dynamo_eventstore.application.event_sourcing.registry import EventDataRegistry
from dynamo_eventstore.application.event_sourcing.sequencer import VersionSequencer
from dynamo_eventstore.application.event_sourcing.store import EventStore, InMemoryEventStore

__all__ = [
    "AggregateNotFoundError",
    "ConcurrencyConflictError",
    "EventCodec",
    "EventDataRegistrationError",
    "EventDataRegistry",
    "EventDecodingError",
    "EventEncodingError",
    "EventHandler",
    "EventHandlerError",
    "EventHandlerFunc",
    "EventNotFoundError",
    "EventRecord",
    "EventStore",
    "EventStoreConfigError",
    "EventStoreError",
    "IncorrectVersionError",
    "InMemoryEventStore",
    "InvalidEventError",
    "NoEventsError",
    "StorageError",
    "TableNotReadyError",
    "VersionSequencer",
]
