"""Kernel error hierarchy — public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError          (domain.py)
    │   ├── ValidationError
    │   └── ConflictError
    ├── ApplicationError     (application.py)
    └── InfrastructureError  (infrastructure.py)
        ├── TimeoutError
        └── SerializationError

Event-store errors (``application.event_sourcing.errors``) mix one of these
categories with ``EventStoreError`` so callers can catch either axis.
"""

from dynamo_eventstore.kernel.errors.application import ApplicationError
from dynamo_eventstore.kernel.errors.base import BaseError
from dynamo_eventstore.kernel.errors.domain import (
    ConflictError,
    DomainError,
    ValidationError,
)
from dynamo_eventstore.kernel.errors.infrastructure import (
    InfrastructureError,
    SerializationError,
)
from dynamo_eventstore.kernel.errors.infrastructure import TimeoutError as InfrastructureTimeoutError

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConflictError",
    "DomainError",
    "InfrastructureError",
    "InfrastructureTimeoutError",
    "SerializationError",
    "ValidationError",
]
