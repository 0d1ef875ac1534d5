"""Event store error taxonomy.

Every class derives from :class:`EventStoreError` (which carries the
resolved ``namespace``) *and* from one kernel category, so callers can
branch either on "is this the event store" or on "is this a conflict /
validation / infrastructure failure"::

    EventStoreError
    ├── EventStoreConfigError      (+ ConfigError)
    │   └── EventDataRegistrationError
    ├── NoEventsError              (+ ValidationError)
    ├── InvalidEventError          (+ ValidationError)
    │   └── EventNotFoundError
    ├── IncorrectVersionError      (+ ValidationError)
    ├── ConcurrencyConflictError   (+ ConflictError)
    ├── AggregateNotFoundError     (+ DomainError)
    ├── EventEncodingError         (+ SerializationError)
    ├── EventDecodingError         (+ SerializationError)
    ├── EventHandlerError          (+ ApplicationError)
    └── StorageError               (+ InfrastructureError)
        └── TableNotReadyError     (retryable)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dynamo_eventstore.config.validation import ConfigError
from dynamo_eventstore.kernel.errors import (
    ApplicationError,
    BaseError,
    ConflictError,
    DomainError,
    InfrastructureError,
    SerializationError,
    ValidationError,
)

if TYPE_CHECKING:
    from dynamo_eventstore.kernel.ddd.event import Event


class EventStoreError(BaseError):
    """Base for every error raised by the event store."""

    default_code = "event_store_error"

    def __init__(self, message: str, *, namespace: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.namespace = namespace
        if namespace is not None:
            self.detail.setdefault("namespace", namespace)


class EventStoreConfigError(EventStoreError, ConfigError):
    """The store or one of its collaborators is not configured."""

    default_code = "event_store_config_error"


class EventDataRegistrationError(EventStoreConfigError):
    """A type tag is already bound to a different payload class."""

    default_code = "event_data_registration_error"


class NoEventsError(EventStoreError, ValidationError):
    """``save`` was called with an empty batch."""

    default_code = "no_events_to_append"

    def __init__(self, message: str = "no events to append", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class InvalidEventError(EventStoreError, ValidationError):
    """The event does not fit the stream it targets."""

    default_code = "invalid_event"


class EventNotFoundError(InvalidEventError):
    """``replace`` targeted an ``(aggregate, version)`` slot that holds no record."""

    default_code = "event_not_found"

    def __init__(self, aggregate_id: str, version: int, **kwargs: Any) -> None:
        super().__init__(
            f"no event stored for aggregate '{aggregate_id}' at version {version}",
            **kwargs,
        )
        self.aggregate_id = aggregate_id
        self.version = version
        self.detail.update(aggregate_id=aggregate_id, version=version)


class IncorrectVersionError(EventStoreError, ValidationError):
    """An event in the batch is not the next contiguous version."""

    default_code = "incorrect_event_version"

    def __init__(self, aggregate_id: str, expected: int, actual: int, **kwargs: Any) -> None:
        super().__init__(
            f"incorrect event version for aggregate '{aggregate_id}': "
            f"expected {expected}, got {actual}",
            **kwargs,
        )
        self.aggregate_id = aggregate_id
        self.expected = expected
        self.actual = actual
        self.detail.update(aggregate_id=aggregate_id, expected=expected, actual=actual)


class ConcurrencyConflictError(EventStoreError, ConflictError):
    """Another writer already occupies the ``(aggregate, version)`` slot.

    Re-read the stream and retry with a fresh batch; the store never retries.
    """

    default_code = "concurrency_conflict"

    def __init__(self, aggregate_id: str, version: int, **kwargs: Any) -> None:
        super().__init__(
            f"could not save aggregate '{aggregate_id}': version {version} already exists",
            **kwargs,
        )
        self.aggregate_id = aggregate_id
        self.version = version
        self.detail.update(aggregate_id=aggregate_id, version=version)


class AggregateNotFoundError(EventStoreError, DomainError):
    """The aggregate has no stored events."""

    default_code = "aggregate_not_found"

    def __init__(self, aggregate_id: str, **kwargs: Any) -> None:
        super().__init__(f"aggregate '{aggregate_id}' not found", **kwargs)
        self.aggregate_id = aggregate_id
        self.detail.setdefault("aggregate_id", aggregate_id)


class EventEncodingError(EventStoreError, SerializationError):
    """The event payload or metadata cannot be represented as DynamoDB attributes."""

    default_code = "could_not_marshal_event"


class EventDecodingError(EventStoreError, SerializationError):
    """Stored attributes do not fit the payload class registered for the tag."""

    default_code = "could_not_unmarshal_event"


class EventHandlerError(EventStoreError, ApplicationError):
    """The downstream handler failed after the events were persisted."""

    default_code = "could_not_handle_event"

    def __init__(self, event: "Event", **kwargs: Any) -> None:
        super().__init__(f"could not handle event {event}", **kwargs)
        self.event = event
        self.detail.update(
            aggregate_id=str(event.aggregate_id),
            version=event.version,
            event_type=event.event_type,
        )


class StorageError(EventStoreError, InfrastructureError):
    """Transport or storage failure reported by DynamoDB."""

    default_code = "storage_error"


class TableNotReadyError(StorageError):
    """The table did not reach the expected state before the waiter gave up."""

    default_code = "table_not_ready"
    retryable = True


__all__ = [
    "AggregateNotFoundError",
    "ConcurrencyConflictError",
    "EventDataRegistrationError",
    "EventDecodingError",
    "EventEncodingError",
    "EventHandlerError",
    "EventNotFoundError",
    "EventStoreConfigError",
    "EventStoreError",
    "IncorrectVersionError",
    "InvalidEventError",
    "NoEventsError",
    "StorageError",
    "TableNotReadyError",
]
