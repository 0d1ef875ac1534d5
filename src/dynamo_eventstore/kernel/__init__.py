"""Kernel – framework-agnostic building blocks (errors, events, ids, clock)."""

from dynamo_eventstore.kernel.errors import (
    ApplicationError,
    BaseError,
    ConflictError,
    DomainError,
    InfrastructureError,
    SerializationError,
    ValidationError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConflictError",
    "DomainError",
    "InfrastructureError",
    "SerializationError",
    "ValidationError",
]
