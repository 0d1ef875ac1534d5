"""DynamoDB adapter — DynamoReadRepository for read models.

Keyed CRUD and scan/filter over projections that live in their own table.
There are no versions and no concurrency checks: ``save`` is a plain put.

Entities are dataclasses with an ``id`` field; it is stored as the ``ID``
partition key, every other field as an attribute of the same name.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Generic, TypeVar

from botocore.exceptions import ClientError

from dynamo_eventstore.adapters.dynamodb.client import (
    RESOURCE_NOT_FOUND,
    call,
    client_error_code,
    collect_pages,
    storage_error,
)
from dynamo_eventstore.adapters.dynamodb.expressions import BoundExpression, bind, merge
from dynamo_eventstore.adapters.dynamodb.naming import TableNameFn, select_table_name
from dynamo_eventstore.adapters.dynamodb.tables import KeyAttribute, TableLifecycle
from dynamo_eventstore.application.event_sourcing.codec import (
    build_dataclass,
    dataclass_fields,
    from_attribute_map,
    to_attribute_map,
)
from dynamo_eventstore.application.event_sourcing.errors import (
    EventStoreConfigError,
    EventStoreError,
)
from dynamo_eventstore.kernel.ddd.namespace import DEFAULT_NAMESPACE, resolve_namespace
from dynamo_eventstore.kernel.errors import DomainError, SerializationError, ValidationError
from dynamo_eventstore.kernel.types.ids import EntityId
from dynamo_eventstore.resilience.deadline import Deadline

TEntity = TypeVar("TEntity")

KEY_ATTRIBUTE = "ID"


class ModelNotSetError(EventStoreConfigError):
    """No entity factory was configured on the repository."""

    default_code = "model_not_set"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__("entity factory is not set", **kwargs)


class EntityNotFoundError(EventStoreError, DomainError):
    default_code = "entity_not_found"

    def __init__(self, entity_id: str, **kwargs: Any) -> None:
        super().__init__(f"entity '{entity_id}' not found", **kwargs)
        self.entity_id = entity_id
        self.detail.setdefault("entity_id", entity_id)


class EntityIdMissingError(EventStoreError, ValidationError):
    default_code = "missing_entity_id"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__("could not save entity: missing entity id", **kwargs)


class EntityMappingError(EventStoreError, SerializationError):
    """An entity could not be mapped to or from a DynamoDB item."""

    default_code = "entity_mapping_error"


@dataclasses.dataclass(frozen=True)
class IndexInput:
    """Key condition for a query against a secondary index."""

    index_name: str
    partition_key: str
    partition_key_value: Any
    sort_key: str
    sort_key_value: Any


class DynamoReadRepository(Generic[TEntity]):
    """Read-model repository on DynamoDB.

    Usage::

        @dataclasses.dataclass
        class OrderSummary:
            id: EntityId
            status: str
            total: float

        repo = DynamoReadRepository(client, "orderSummaries", entity_factory=OrderSummary)
        await repo.save(OrderSummary(EntityId("o-1"), "placed", 12.5))
        placed = await repo.find_with_filter("$ = ?", "status", "placed")
    """

    def __init__(
        self,
        client: Any,
        table_prefix: str,
        *,
        entity_factory: Callable[..., TEntity] | None = None,
        table_name: TableNameFn | None = None,
        use_prefix_as_table_name: bool = False,
        default_namespace: str = DEFAULT_NAMESPACE,
        waiter_delay: int = 1,
        waiter_max_attempts: int = 25,
    ) -> None:
        if client is None:
            raise EventStoreConfigError("DynamoDB client is not set")
        if not table_prefix:
            raise EventStoreConfigError("table prefix must not be empty")
        self._client = client
        self._table_prefix = table_prefix
        self._factory = entity_factory
        self._table_name = select_table_name(table_name, use_prefix_as_table_name)
        self._default_namespace = default_namespace
        self._tables = TableLifecycle(
            client, waiter_delay=waiter_delay, waiter_max_attempts=waiter_max_attempts
        )

    def set_entity_factory(self, factory: Callable[..., TEntity]) -> None:
        self._factory = factory

    def resolve_table(self, namespace: str | None = None) -> str:
        ns = resolve_namespace(namespace, self._default_namespace)
        return self._table_name(self._table_prefix, ns)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find(
        self,
        entity_id: EntityId | str,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> TEntity:
        ns, table = self._route(namespace)
        self._require_factory(ns)
        try:
            response = await call(
                self._client.get_item,
                deadline=deadline,
                namespace=ns,
                TableName=table,
                Key={KEY_ATTRIBUTE: {"S": str(entity_id)}},
                ConsistentRead=True,
            )
        except ClientError as exc:
            if client_error_code(exc) == RESOURCE_NOT_FOUND:
                raise EntityNotFoundError(str(entity_id), namespace=ns, cause=exc) from exc
            raise storage_error(exc, namespace=ns, operation="GetItem", table=table) from exc
        item = response.get("Item")
        if not item:
            raise EntityNotFoundError(str(entity_id), namespace=ns)
        return self._from_item(item, ns)

    async def find_all(
        self,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> list[TEntity]:
        ns, table = self._route(namespace)
        self._require_factory(ns)
        items = await self._scan(ns, table, deadline, ConsistentRead=True)
        return [self._from_item(item, ns) for item in items]

    async def find_with_filter(
        self,
        expression: str,
        *args: Any,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> list[TEntity]:
        """Scan with a filter; ``?`` / ``$`` placeholders bind *args* in order."""
        ns, table = self._route(namespace)
        self._require_factory(ns)
        bound = self._bind(expression, args, "f", ns)
        items = await self._scan(
            ns, table, deadline, ConsistentRead=True, **bound.as_params("FilterExpression")
        )
        return [self._from_item(item, ns) for item in items]

    async def find_with_filter_using_index(
        self,
        index_input: IndexInput,
        filter_expression: str,
        *filter_args: Any,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> list[TEntity]:
        """Query *index_input*'s index on partition key = and sort key =, then filter."""
        ns, table = self._route(namespace)
        self._require_factory(ns)
        key = self._bind(
            "$ = ? AND $ = ?",
            (
                index_input.partition_key,
                index_input.partition_key_value,
                index_input.sort_key,
                index_input.sort_key_value,
            ),
            "k",
            ns,
        )
        params: dict[str, Any] = {
            "IndexName": index_input.index_name,
            "KeyConditionExpression": key.expression,
        }
        parts = [key]
        if filter_expression:
            flt = self._bind(filter_expression, filter_args, "f", ns)
            params["FilterExpression"] = flt.expression
            parts.append(flt)
        names, values = merge(*parts)
        params["ExpressionAttributeNames"] = names
        params["ExpressionAttributeValues"] = values
        try:
            items = await collect_pages(
                self._client.query, deadline=deadline, namespace=ns, TableName=table, **params
            )
        except ClientError as exc:
            raise storage_error(exc, namespace=ns, operation="Query", table=table) from exc
        return [self._from_item(item, ns) for item in items]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def save(
        self,
        entity: TEntity,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        ns, table = self._route(namespace)
        if not getattr(entity, "id", None):
            raise EntityIdMissingError(namespace=ns)
        item = self._to_item(entity, ns)
        try:
            await call(self._client.put_item, deadline=deadline, namespace=ns, TableName=table, Item=item)
        except ClientError as exc:
            err = storage_error(exc, namespace=ns, operation="PutItem", table=table)
            err.detail["entity_id"] = str(entity.id)  # type: ignore[attr-defined]
            raise err from exc

    async def remove(
        self,
        entity_id: EntityId | str,
        *,
        namespace: str | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        ns, table = self._route(namespace)
        try:
            await call(
                self._client.delete_item,
                deadline=deadline,
                namespace=ns,
                TableName=table,
                Key={KEY_ATTRIBUTE: {"S": str(entity_id)}},
                ConditionExpression="attribute_exists(#id)",
                ExpressionAttributeNames={"#id": KEY_ATTRIBUTE},
            )
        except ClientError as exc:
            if client_error_code(exc) in ("ConditionalCheckFailedException", RESOURCE_NOT_FOUND):
                raise EntityNotFoundError(str(entity_id), namespace=ns, cause=exc) from exc
            raise storage_error(exc, namespace=ns, operation="DeleteItem", table=table) from exc

    # ------------------------------------------------------------------
    # Table lifecycle
    # ------------------------------------------------------------------

    async def create_table(self, *, namespace: str | None = None, deadline: Deadline | None = None) -> None:
        ns, table = self._route(namespace)
        self._require_factory(ns)
        await self._tables.create_table(
            table, namespace=ns, keys=(KeyAttribute(KEY_ATTRIBUTE, "HASH", "S"),), deadline=deadline
        )

    async def delete_table(self, *, namespace: str | None = None, deadline: Deadline | None = None) -> None:
        ns, table = self._route(namespace)
        await self._tables.delete_table(table, namespace=ns, deadline=deadline)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _route(self, namespace: str | None) -> tuple[str, str]:
        ns = resolve_namespace(namespace, self._default_namespace)
        return ns, self._table_name(self._table_prefix, ns)

    def _require_factory(self, namespace: str) -> None:
        if self._factory is None:
            raise ModelNotSetError(namespace=namespace)

    def _bind(self, expression: str, args: Any, prefix: str, namespace: str) -> BoundExpression:
        try:
            return bind(expression, args, prefix=prefix)
        except (TypeError, ValueError, ArithmeticError) as exc:
            raise EntityMappingError(
                f"could not bind expression {expression!r}: {exc}", namespace=namespace, cause=exc
            ) from exc

    async def _scan(
        self, namespace: str, table: str, deadline: Deadline | None, **params: Any
    ) -> list[dict[str, Any]]:
        try:
            return await collect_pages(
                self._client.scan, deadline=deadline, namespace=namespace, TableName=table, **params
            )
        except ClientError as exc:
            raise storage_error(exc, namespace=namespace, operation="Scan", table=table) from exc

    def _to_item(self, entity: Any, namespace: str) -> dict[str, Any]:
        if not dataclasses.is_dataclass(entity) or isinstance(entity, type):
            raise EntityMappingError(
                f"entity must be a dataclass instance, got {type(entity).__name__}",
                namespace=namespace,
            )
        values = dataclass_fields(entity)
        entity_id = values.pop("id")
        try:
            item = to_attribute_map(values)
        except (TypeError, ValueError, ArithmeticError) as exc:
            raise EntityMappingError(
                f"could not marshal entity '{entity_id}': {exc}", namespace=namespace, cause=exc
            ) from exc
        item[KEY_ATTRIBUTE] = {"S": str(entity_id)}
        return item

    def _from_item(self, item: dict[str, Any], namespace: str) -> TEntity:
        values = from_attribute_map(item)
        values["id"] = values.pop(KEY_ATTRIBUTE, None)
        try:
            return build_dataclass(self._factory, values)  # type: ignore[arg-type]
        except (TypeError, ValueError, ArithmeticError) as exc:
            raise EntityMappingError(
                f"could not unmarshal entity '{values['id']}': {exc}",
                namespace=namespace,
                cause=exc,
            ) from exc


__all__ = [
    "DynamoReadRepository",
    "EntityIdMissingError",
    "EntityMappingError",
    "EntityNotFoundError",
    "IndexInput",
    "KEY_ATTRIBUTE",
    "ModelNotSetError",
]
