"""Application event sourcing – EventDataRegistry.

Maps a type tag (``"OrderPlaced"``) to the dataclass its payload decodes
into. Populate it once at start-up and hand it to the store::

    registry = EventDataRegistry()

    @registry.registers("OrderPlaced")
    @dataclasses.dataclass(frozen=True)
    class OrderPlaced(EventData):
        order_id: str
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, TypeVar

from dynamo_eventstore.application.event_sourcing.errors import EventDataRegistrationError

T = TypeVar("T", bound=type)


class EventDataRegistry:
    """Type tag → payload class lookup used when decoding records."""

    def __init__(self) -> None:
        self._types: dict[str, type] = {}

    def register(self, event_type: str, data_cls: type) -> None:
        if not event_type:
            raise EventDataRegistrationError("event type must not be empty")
        if not (isinstance(data_cls, type) and dataclasses.is_dataclass(data_cls)):
            raise EventDataRegistrationError(
                f"payload class for '{event_type}' must be a dataclass, got {data_cls!r}"
            )
        existing = self._types.get(event_type)
        if existing is not None and existing is not data_cls:
            raise EventDataRegistrationError(
                f"event type '{event_type}' is already registered to {existing.__qualname__}"
            )
        self._types[event_type] = data_cls

    def registers(self, event_type: str) -> Callable[[T], T]:
        """Class-decorator form of :meth:`register`."""

        def _decorator(data_cls: T) -> T:
            self.register(event_type, data_cls)
            return data_cls

        return _decorator

    def unregister(self, event_type: str) -> None:
        self._types.pop(event_type, None)

    def lookup(self, event_type: str) -> type | None:
        return self._types.get(event_type)

    def is_registered(self, event_type: str) -> bool:
        return event_type in self._types

    def registered_types(self) -> list[str]:
        return sorted(self._types)

    def __contains__(self, event_type: Any) -> bool:
        return event_type in self._types

    def __len__(self) -> int:
        return len(self._types)


__all__ = ["EventDataRegistry"]
