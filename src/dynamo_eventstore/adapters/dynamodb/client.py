"""DynamoDB adapter — client bootstrap and shared call helpers."""

from __future__ import annotations

import contextlib
from typing import Any, AsyncIterator, Awaitable, Callable

from aiobotocore.session import get_session
from botocore.exceptions import ClientError

from dynamo_eventstore.application.event_sourcing.errors import StorageError
from dynamo_eventstore.config.settings import EventStoreSettings
from dynamo_eventstore.resilience.deadline import Deadline, deadline_aware

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"
RESOURCE_NOT_FOUND = "ResourceNotFoundException"
RESOURCE_IN_USE = "ResourceInUseException"

_RETRYABLE_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "RequestLimitExceeded",
        "ThrottlingException",
        "InternalServerError",
        "ServiceUnavailable",
    }
)


@contextlib.asynccontextmanager
async def dynamodb_client(settings: EventStoreSettings) -> AsyncIterator[Any]:
    """Open an ``aiobotocore`` DynamoDB client configured from *settings*.

    Example::

        async with dynamodb_client(EventStoreSettings()) as client:
            store = DynamoEventStore(EventStoreConfig(client=client, registry=registry))
    """
    kwargs: dict[str, Any] = {"region_name": settings.region_name}
    if settings.endpoint_url:
        kwargs["endpoint_url"] = settings.endpoint_url
    if settings.aws_access_key_id:
        kwargs["aws_access_key_id"] = settings.aws_access_key_id
        kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
    session = get_session()
    async with session.create_client("dynamodb", **kwargs) as client:
        yield client


def client_error_code(exc: BaseException) -> str | None:
    """Return the DynamoDB error code of a ``ClientError`` (``None`` otherwise)."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


def storage_error(
    exc: ClientError,
    *,
    namespace: str,
    operation: str,
    table: str | None = None,
) -> StorageError:
    """Wrap a ``ClientError`` as :class:`StorageError` with diagnostic context."""
    code = client_error_code(exc)
    err = StorageError(
        f"DynamoDB {operation} failed: {code or 'unknown error'}",
        namespace=namespace,
        detail={"operation": operation, "table": table, "aws_error_code": code},
        cause=exc,
    )
    if code in _RETRYABLE_CODES:
        err.retryable = True
    return err


async def call(
    fn: Callable[..., Awaitable[Any]],
    *,
    deadline: Deadline | None = None,
    namespace: str,
    **params: Any,
) -> Any:
    """Invoke one client method under the caller's deadline."""
    operation = getattr(fn, "__name__", "call")
    return await deadline_aware(
        fn(**params),
        deadline,
        namespace=namespace,
        operation=operation,
        table=params.get("TableName"),
    )


async def collect_pages(
    fn: Callable[..., Awaitable[Any]],
    *,
    deadline: Deadline | None = None,
    namespace: str,
    **params: Any,
) -> list[dict[str, Any]]:
    """Run a ``query`` / ``scan`` to exhaustion and return every item.

    With ``Select="COUNT"`` the result is empty; use :func:`count_pages`.
    """
    items: list[dict[str, Any]] = []
    async for page in _pages(fn, deadline=deadline, namespace=namespace, **params):
        items.extend(page.get("Items", []))
    return items


async def count_pages(
    fn: Callable[..., Awaitable[Any]],
    *,
    deadline: Deadline | None = None,
    namespace: str,
    **params: Any,
) -> int:
    total = 0
    async for page in _pages(fn, deadline=deadline, namespace=namespace, Select="COUNT", **params):
        total += page.get("Count", 0)
    return total


async def _pages(
    fn: Callable[..., Awaitable[Any]],
    *,
    deadline: Deadline | None,
    namespace: str,
    **params: Any,
) -> AsyncIterator[dict[str, Any]]:
    start_key: dict[str, Any] | None = None
    while True:
        if start_key is not None:
            params["ExclusiveStartKey"] = start_key
        page = await call(fn, deadline=deadline, namespace=namespace, **params)
        yield page
        start_key = page.get("LastEvaluatedKey")
        if not start_key:
            return


__all__ = [
    "CONDITIONAL_CHECK_FAILED",
    "RESOURCE_IN_USE",
    "RESOURCE_NOT_FOUND",
    "call",
    "client_error_code",
    "collect_pages",
    "count_pages",
    "dynamodb_client",
    "storage_error",
]
