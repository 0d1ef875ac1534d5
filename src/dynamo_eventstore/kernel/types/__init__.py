"""Kernel types – identifier value objects."""
from dynamo_eventstore.kernel.types.ids import EntityId

__all__ = ["EntityId"]
