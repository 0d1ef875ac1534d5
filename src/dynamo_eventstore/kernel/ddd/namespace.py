"""Namespace (tenant) context.

Each namespace maps to its own physical table. Store operations take an
explicit ``namespace=`` argument; when it is omitted the ambient value set
through :class:`NamespaceContext` is used, then :data:`DEFAULT_NAMESPACE`.
"""

from __future__ import annotations

import contextlib
from contextvars import ContextVar, Token
from typing import AsyncIterator

from dynamo_eventstore.kernel.errors.domain import ValidationError

DEFAULT_NAMESPACE = "default"

_NAMESPACE_CTX_VAR: ContextVar[str | None] = ContextVar(
    "_eventstore_namespace_ctx", default=None
)


class NamespaceContext:
    """Ambient namespace using ``contextvars``."""

    @staticmethod
    def set(namespace: str) -> Token[str | None]:
        if not namespace:
            raise ValidationError("Namespace must not be empty")
        return _NAMESPACE_CTX_VAR.set(namespace)

    @staticmethod
    def get() -> str | None:
        return _NAMESPACE_CTX_VAR.get()

    @staticmethod
    def reset(token: Token[str | None]) -> None:
        _NAMESPACE_CTX_VAR.reset(token)

    @staticmethod
    @contextlib.asynccontextmanager
    async def scoped(namespace: str) -> AsyncIterator[None]:
        """Async context manager — sets *namespace* for the duration of the block.

        The previous namespace (if any) is restored on exit, even on error.

        Example::

            async with NamespaceContext.scoped("acme"):
                events = await store.load(order_id)
        """
        token = NamespaceContext.set(namespace)
        try:
            yield
        finally:
            _NAMESPACE_CTX_VAR.reset(token)


def resolve_namespace(explicit: str | None = None, default: str = DEFAULT_NAMESPACE) -> str:
    """Return *explicit*, else the ambient namespace, else *default*."""
    if explicit:
        return explicit
    return _NAMESPACE_CTX_VAR.get() or default


__all__ = ["DEFAULT_NAMESPACE", "NamespaceContext", "resolve_namespace"]
