"""Infrastructure errors — DynamoDB calls that failed, stalled or could not be (un)marshaled."""

from __future__ import annotations

from typing import Any

from dynamo_eventstore.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """A call to the backing store failed for reasons outside the caller's data."""

    default_code = "infrastructure_error"


class TimeoutError(InfrastructureError):  # noqa: A001
    """A store call or table waiter outlived its deadline; safe to retry."""

    default_code = "infrastructure_timeout"
    retryable = True


class SerializationError(InfrastructureError):
    """A value could not cross the DynamoDB attribute-map boundary.

    ``payload_type`` names the event type (or entity) being marshaled.
    """

    default_code = "serialization_error"

    def __init__(self, message: str, *, payload_type: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.payload_type = payload_type
        if payload_type is not None:
            self.detail.setdefault("payload_type", payload_type)


__all__ = ["InfrastructureError", "SerializationError", "TimeoutError"]
