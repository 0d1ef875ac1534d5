"""Observability – structlog processors and get_logger helper."""
from __future__ import annotations

from typing import Any

import structlog

from dynamo_eventstore.kernel.ddd.namespace import NamespaceContext


class NamespaceProcessor:
    """structlog processor that adds the ambient namespace as ``namespace``.

    An explicitly bound ``namespace`` key always wins.

    Usage::

        structlog.configure(processors=[NamespaceProcessor(), ...])
    """

    def __call__(
        self,
        logger: Any,           # noqa: ARG002
        method_name: str,      # noqa: ARG002
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        namespace = NamespaceContext.get()
        if namespace is not None:
            event_dict.setdefault("namespace", namespace)
        return event_dict


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


__all__ = ["NamespaceProcessor", "get_logger"]
