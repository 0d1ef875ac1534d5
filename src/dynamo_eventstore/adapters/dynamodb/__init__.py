"""DynamoDB adapter — event store, write gate, table lifecycle, read repository.

Requires ``aiobotocore`` (async client) and ``boto3`` (attribute codec)::

    pip install dynamo-eventstore
"""

from dynamo_eventstore.adapters.dynamodb.client import dynamodb_client
from dynamo_eventstore.adapters.dynamodb.event_store import DynamoEventStore, EventStoreConfig
from dynamo_eventstore.adapters.dynamodb.naming import (
    TableNameFn,
    namespaced_table_name,
    prefix_table_name,
)
from dynamo_eventstore.adapters.dynamodb.repository import (
    DynamoReadRepository,
    EntityIdMissingError,
    EntityMappingError,
    EntityNotFoundError,
    IndexInput,
    ModelNotSetError,
)
from dynamo_eventstore.adapters.dynamodb.tables import EVENT_TABLE_KEYS, KeyAttribute, TableLifecycle
from dynamo_eventstore.adapters.dynamodb.write_gate import ConditionalWriteGate

__all__ = [
    "EVENT_TABLE_KEYS",
    "ConditionalWriteGate",
    "DynamoEventStore",
    "DynamoReadRepository",
    "EntityIdMissingError",
    "EntityMappingError",
    "EntityNotFoundError",
    "EventStoreConfig",
    "IndexInput",
    "KeyAttribute",
    "ModelNotSetError",
    "TableLifecycle",
    "TableNameFn",
    "dynamodb_client",
    "namespaced_table_name",
    "prefix_table_name",
]
