"""String-based identifier value objects."""

from __future__ import annotations

import dataclasses
import uuid

from dynamo_eventstore.kernel.errors.domain import ValidationError


@dataclasses.dataclass(frozen=True, slots=True)
class EntityId:
    """Opaque identifier of an aggregate or read-model entity.

    Stored as the partition key string, so any non-empty string is accepted.

    Examples::

        eid = EntityId.generate()           # new random id
        eid = EntityId.from_str("abc-123")  # from an existing string
        eid = EntityId("abc-123")           # direct construction
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise ValidationError(
                f"EntityId value must be a string, got {type(self.value).__name__}"
            )
        if not self.value:
            raise ValidationError("EntityId must not be empty")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> "EntityId":
        """Return a new random ``EntityId`` (UUID4)."""
        return cls(str(uuid.uuid4()))

    @classmethod
    def from_str(cls, value: str) -> "EntityId":
        return cls(value)

    @classmethod
    def coerce(cls, value: "EntityId | str | uuid.UUID") -> "EntityId":
        """Accept an ``EntityId``, a plain string or a ``uuid.UUID``."""
        if isinstance(value, EntityId):
            return value
        return cls(str(value))


__all__ = ["EntityId"]
