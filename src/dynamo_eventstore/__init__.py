"""
dynamo_eventstore – append-only event store for event-sourced aggregates on DynamoDB.

Import path convention::

    from dynamo_eventstore.kernel.ddd import Event, EventData
    from dynamo_eventstore.application.event_sourcing import EventDataRegistry
    from dynamo_eventstore.adapters.dynamodb import DynamoEventStore, EventStoreConfig
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
