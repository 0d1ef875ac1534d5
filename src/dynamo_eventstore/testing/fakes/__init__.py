"""Testing fakes – in-memory doubles for the DynamoDB client and event handlers."""
from dynamo_eventstore.testing.fakes.dynamodb import FakeDynamoDBClient
from dynamo_eventstore.testing.fakes.handler import RecordingEventHandler
from dynamo_eventstore.kernel.time import FrozenClock

__all__ = [
    "FakeDynamoDBClient",
    "FrozenClock",
    "RecordingEventHandler",
]
