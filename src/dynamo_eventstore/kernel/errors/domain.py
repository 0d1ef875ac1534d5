"""Domain errors — rule violations detected before touching storage."""

from __future__ import annotations

from typing import Any

from dynamo_eventstore.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a domain rule is violated."""

    default_code = "domain_error"


class ValidationError(DomainError):
    """Input does not meet validation rules.

    ``errors`` optionally lists field-level failures.
    """

    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors: list[dict[str, Any]] = errors or []

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        if self.errors:
            base["errors"] = self.errors
        return base


class ConflictError(DomainError):
    """The operation lost a race against a concurrent writer."""

    default_code = "conflict"


__all__ = ["ConflictError", "DomainError", "ValidationError"]
