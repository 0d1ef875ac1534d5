"""Resilience – deadline propagation across async boundaries.

Every DynamoDB call issued by the adapters goes through
:func:`deadline_aware`. Cancelling a call does not undo a write the store
has already accepted.
"""
from __future__ import annotations

import asyncio
import contextlib
import inspect
from contextvars import ContextVar, Token
from typing import Any, AsyncIterator, Awaitable

from dynamo_eventstore.kernel.errors import InfrastructureTimeoutError
from dynamo_eventstore.resilience.deadline.deadline import Deadline

__all__ = [
    "DeadlineContext",
    "DeadlineExceededError",
    "deadline_aware",
]


class DeadlineExceededError(InfrastructureTimeoutError):
    """Raised when the active deadline expired before a call completed."""

    default_code = "deadline_exceeded"


_DEADLINE_VAR: ContextVar[Deadline | None] = ContextVar("_eventstore_deadline", default=None)


class DeadlineContext:
    """Context-variable wrapper for propagating deadlines across async boundaries."""

    @staticmethod
    def set(deadline: Deadline) -> Token[Deadline | None]:
        return _DEADLINE_VAR.set(deadline)

    @staticmethod
    def get() -> Deadline | None:
        return _DEADLINE_VAR.get()

    @staticmethod
    def reset(token: Token[Deadline | None]) -> None:
        _DEADLINE_VAR.reset(token)

    @staticmethod
    @contextlib.asynccontextmanager
    async def scoped(deadline: Deadline) -> AsyncIterator[Deadline]:
        token = _DEADLINE_VAR.set(deadline)
        try:
            yield deadline
        finally:
            _DEADLINE_VAR.reset(token)


async def deadline_aware(
    coro: Awaitable[Any],
    deadline: Deadline | None = None,
    **detail: Any,
) -> Any:
    """Await *coro*, abandoning it when the given (or context) deadline expires.

    *detail* (namespace, operation, table, …) is attached to the raised
    :class:`DeadlineExceededError`.
    """
    dl = deadline or _DEADLINE_VAR.get()
    if dl is None:
        return await coro
    remaining = dl.remaining_seconds
    if remaining <= 0:
        # Close the coroutine cleanly to avoid "never awaited" warnings
        if inspect.iscoroutine(coro):
            coro.close()
        raise DeadlineExceededError("Deadline already exceeded", detail=detail)
    try:
        return await asyncio.wait_for(coro, timeout=remaining)
    except asyncio.TimeoutError as exc:
        raise DeadlineExceededError(
            "Deadline exceeded during execution", detail=detail, cause=exc
        ) from exc
