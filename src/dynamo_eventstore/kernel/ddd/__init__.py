"""DDD building blocks — events and namespace context."""

from dynamo_eventstore.kernel.ddd.event import Event, EventData
from dynamo_eventstore.kernel.ddd.namespace import (
    DEFAULT_NAMESPACE,
    NamespaceContext,
    resolve_namespace,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "Event",
    "EventData",
    "NamespaceContext",
    "resolve_namespace",
]
