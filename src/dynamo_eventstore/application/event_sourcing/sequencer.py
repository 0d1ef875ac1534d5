"""Application event sourcing – VersionSequencer."""

from __future__ import annotations

from typing import Sequence

from dynamo_eventstore.application.event_sourcing.errors import (
    IncorrectVersionError,
    InvalidEventError,
    NoEventsError,
)
from dynamo_eventstore.kernel.ddd.event import Event


class VersionSequencer:
    """Checks that a batch is a gapless continuation of one aggregate's stream.

    The whole batch is checked before the caller issues any write.
    """

    def validate(
        self,
        events: Sequence[Event],
        base_version: int,
        *,
        namespace: str | None = None,
    ) -> list[Event]:
        """Return *events* in write order.

        Raises
        ------
        NoEventsError
            The batch is empty.
        InvalidEventError
            An event belongs to another aggregate than the first one.
        IncorrectVersionError
            The i-th event's version is not ``base_version + i + 1``.
        """
        if not events:
            raise NoEventsError(namespace=namespace)
        if base_version < 0:
            raise InvalidEventError(
                f"base version must not be negative, got {base_version}", namespace=namespace
            )

        aggregate_id = str(events[0].aggregate_id)
        expected = base_version
        for event in events:
            if str(event.aggregate_id) != aggregate_id:
                raise InvalidEventError(
                    f"event {event} belongs to aggregate '{event.aggregate_id}', "
                    f"batch is for '{aggregate_id}'",
                    namespace=namespace,
                    detail={"aggregate_id": aggregate_id},
                )
            expected += 1
            if event.version != expected:
                raise IncorrectVersionError(
                    aggregate_id, expected, event.version, namespace=namespace
                )
        return list(events)


__all__ = ["VersionSequencer"]
