"""Application-layer errors — configuration and collaborator callbacks."""

from __future__ import annotations

from dynamo_eventstore.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


__all__ = ["ApplicationError"]
