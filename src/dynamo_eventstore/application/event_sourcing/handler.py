"""Application event sourcing – downstream EventHandler port."""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol, runtime_checkable

from dynamo_eventstore.kernel.ddd.event import Event


@runtime_checkable
class EventHandler(Protocol):
    """Called once per saved event, in save order, after it is durable.

    A failure is reported as ``EventHandlerError``; the write stays.
    """

    async def handle_event(self, event: Event) -> None: ...


class EventHandlerFunc:
    """Adapt a plain ``async def fn(event)`` into an :class:`EventHandler`."""

    def __init__(self, fn: Callable[[Event], Awaitable[None]]) -> None:
        self._fn = fn

    async def handle_event(self, event: Event) -> None:
        await self._fn(event)


__all__ = ["EventHandler", "EventHandlerFunc"]
