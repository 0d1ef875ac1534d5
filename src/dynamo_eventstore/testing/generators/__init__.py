"""Testing generators – Hypothesis strategies."""
from dynamo_eventstore.testing.generators.strategies import (
    attribute_key_strategy,
    event_batch_strategy,
    payload_strategy,
    scalar_strategy,
)

__all__ = [
    "attribute_key_strategy",
    "event_batch_strategy",
    "payload_strategy",
    "scalar_strategy",
]
