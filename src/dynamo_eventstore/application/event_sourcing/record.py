"""Application event sourcing – EventRecord, the durable unit."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Any


@dataclasses.dataclass(frozen=True)
class EventRecord:
    """An event as persisted in one DynamoDB item.

    ``raw_data`` and ``raw_metadata`` hold DynamoDB attribute maps
    (``{"field": {"S": "..."}}``). They are opaque to the store: only
    :class:`~dynamo_eventstore.application.event_sourcing.codec.EventCodec`
    produces and interprets them.
    """

    aggregate_id: str
    """Partition key (``AggregateID``)."""

    version: int
    """Sort key (``Version``); 1-based and contiguous per aggregate."""

    event_type: str
    """Type tag (``EventType``) naming the payload class."""

    timestamp: datetime
    aggregate_type: str = ""

    raw_data: dict[str, Any] | None = None
    """Encoded payload; ``None`` means the event carries no data."""

    raw_metadata: dict[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def key(self) -> tuple[str, int]:
        return (self.aggregate_id, self.version)


__all__ = ["EventRecord"]
