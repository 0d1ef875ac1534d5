"""Domain events as seen by callers of the event store."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any

from dynamo_eventstore.kernel.time.clock import Clock, utc_now
from dynamo_eventstore.kernel.types.ids import EntityId


class EventData:
    """Marker base for event payloads.

    Payloads are dataclasses; subclassing ``EventData`` is optional but
    documents intent.

    Example::

        @dataclasses.dataclass(frozen=True)
        class OrderPlaced(EventData):
            order_id: str
            total: float
    """


@dataclasses.dataclass(frozen=True)
class Event:
    """An immutable fact about one aggregate, at one version.

    ``data`` is ``None`` when the event carries no payload, or when it was
    loaded from a record whose type tag has no registered payload class.
    """

    event_type: str
    aggregate_id: EntityId
    version: int
    aggregate_type: str = ""
    data: Any | None = None
    timestamp: datetime = dataclasses.field(default_factory=utc_now)
    metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.aggregate_id, EntityId):
            object.__setattr__(self, "aggregate_id", EntityId.coerce(self.aggregate_id))

    @classmethod
    def new(
        cls,
        event_type: str,
        data: Any | None,
        aggregate_type: str,
        aggregate_id: EntityId | str,
        version: int,
        *,
        metadata: dict[str, Any] | None = None,
        clock: Clock | None = None,
    ) -> "Event":
        """Build an event stamped with *clock* (system UTC time by default)."""
        return cls(
            event_type=event_type,
            aggregate_id=EntityId.coerce(aggregate_id),
            version=version,
            aggregate_type=aggregate_type,
            data=data,
            timestamp=clock.now() if clock is not None else utc_now(),
            metadata=dict(metadata or {}),
        )

    def with_metadata(self, **values: Any) -> "Event":
        """Return a copy with *values* merged into ``metadata``."""
        return dataclasses.replace(self, metadata={**self.metadata, **values})

    def with_data(self, data: Any | None) -> "Event":
        return dataclasses.replace(self, data=data)

    def __str__(self) -> str:
        return f"{self.event_type}@{self.version}"


__all__ = ["Event", "EventData"]
