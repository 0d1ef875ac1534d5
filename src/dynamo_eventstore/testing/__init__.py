"""Testing support – fakes and Hypothesis strategies.

Fakes are importable without extra dependencies beyond the runtime stack::

    from dynamo_eventstore.testing import FakeDynamoDBClient, RecordingEventHandler

Strategies need ``hypothesis`` (the ``test`` extra)::

    from dynamo_eventstore.testing.generators import event_batch_strategy
"""

from dynamo_eventstore.testing.fakes import (
    FakeDynamoDBClient,
    FrozenClock,
    RecordingEventHandler,
)

__all__ = [
    "FakeDynamoDBClient",
    "FrozenClock",
    "RecordingEventHandler",
]
