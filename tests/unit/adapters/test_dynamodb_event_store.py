"""Unit tests for DynamoEventStore against the in-memory DynamoDB fake."""

from __future__ import annotations

import asyncio
import dataclasses
from datetime import UTC, datetime
from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from dynamo_eventstore.adapters.dynamodb import (
    DynamoEventStore,
    EventStoreConfig,
    namespaced_table_name,
)
from dynamo_eventstore.application.event_sourcing import (
    AggregateNotFoundError,
    ConcurrencyConflictError,
    EventDataRegistry,
    EventDecodingError,
    EventEncodingError,
    EventHandlerError,
    EventNotFoundError,
    EventStore,
    EventStoreConfigError,
    IncorrectVersionError,
    InvalidEventError,
    NoEventsError,
    StorageError,
)
from dynamo_eventstore.application.event_sourcing.codec import plain
from dynamo_eventstore.config import EventStoreSettings
from dynamo_eventstore.kernel.ddd.event import Event, EventData
from dynamo_eventstore.kernel.ddd.namespace import NamespaceContext
from dynamo_eventstore.kernel.time import FrozenClock
from dynamo_eventstore.resilience.deadline import Deadline, DeadlineContext, DeadlineExceededError
from dynamo_eventstore.testing.fakes import FakeDynamoDBClient, RecordingEventHandler
from dynamo_eventstore.testing.generators import event_batch_strategy

_T0 = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
_CLOCK = FrozenClock(_T0)
# Payload types with no registered dataclass; their dict payloads load back as None.
_UNREGISTERED = ("ItemTagged", "ItemNoted")


@dataclasses.dataclass(frozen=True)
class OrderCreated(EventData):
    customer: str
    total: float


@dataclasses.dataclass(frozen=True)
class OrderPaid(EventData):
    amount: float
    method: str = "card"


def _registry() -> EventDataRegistry:
    registry = EventDataRegistry()
    registry.register("OrderCreated", OrderCreated)
    registry.register("OrderPlaced", OrderCreated)
    registry.register("OrderPaid", OrderPaid)
    return registry


def _created(aggregate_id: str, version: int, customer: str = "c-1") -> Event:
    return Event.new(
        "OrderCreated",
        OrderCreated(customer=customer, total=10.0 * version),
        "Order",
        aggregate_id,
        version,
        metadata={"user": "u-1"},
        clock=_CLOCK,
    )


def _paid(aggregate_id: str, version: int, amount: float = 9.5) -> Event:
    return Event.new("OrderPaid", OrderPaid(amount=amount), "Order", aggregate_id, version, clock=_CLOCK)


def _batch(aggregate_id: str, first: int, last: int) -> list[Event]:
    return [_created(aggregate_id, v) for v in range(first, last + 1)]


def _store(client: FakeDynamoDBClient | None = None, **overrides: Any) -> DynamoEventStore:
    config = EventStoreConfig(
        client=client if client is not None else FakeDynamoDBClient(),
        registry=_registry(),
        table_prefix="events",
        **overrides,
    )
    return DynamoEventStore(config)


async def _ready_store(client: FakeDynamoDBClient | None = None, **overrides: Any) -> DynamoEventStore:
    store = _store(client, **overrides)
    await store.create_table()
    return store


# ---------------------------------------------------------------------------
# Configuration and routing
# ---------------------------------------------------------------------------


class TestEventStoreConfig:
    def test_requires_client(self) -> None:
        with pytest.raises(EventStoreConfigError):
            EventStoreConfig(client=None, registry=_registry())

    def test_requires_registry(self) -> None:
        with pytest.raises(EventStoreConfigError):
            EventStoreConfig(client=FakeDynamoDBClient(), registry=None)  # type: ignore[arg-type]

    def test_requires_prefix(self) -> None:
        with pytest.raises(EventStoreConfigError):
            EventStoreConfig(client=FakeDynamoDBClient(), registry=_registry(), table_prefix="")

    def test_table_name_must_be_callable(self) -> None:
        with pytest.raises(EventStoreConfigError):
            EventStoreConfig(client=FakeDynamoDBClient(), registry=_registry(), table_name="t")  # type: ignore[arg-type]

    def test_handler_must_handle_events(self) -> None:
        with pytest.raises(EventStoreConfigError):
            EventStoreConfig(client=FakeDynamoDBClient(), registry=_registry(), event_handler=object())  # type: ignore[arg-type]

    def test_from_settings(self) -> None:
        settings = EventStoreSettings(table_prefix="orders", default_namespace="acme", waiter_delay=2)
        config = EventStoreConfig.from_settings(
            settings, client=FakeDynamoDBClient(), registry=_registry(), use_prefix_as_table_name=True
        )
        assert config.table_prefix == "orders"
        assert config.default_namespace == "acme"
        assert config.waiter_delay == 2
        assert config.use_prefix_as_table_name is True

    def test_is_an_event_store(self) -> None:
        assert isinstance(_store(), EventStore)


class TestTableRouting:
    def test_default_routing(self) -> None:
        store = _store()
        assert store.resolve_table() == "events_default"
        assert store.resolve_table("acme") == "events_acme"

    def test_ambient_namespace(self) -> None:
        store = _store()
        token = NamespaceContext.set("ctx")
        try:
            assert store.resolve_table() == "events_ctx"
            assert store.resolve_table("explicit") == "events_explicit"
        finally:
            NamespaceContext.reset(token)

    def test_prefix_as_table_name(self) -> None:
        store = _store(use_prefix_as_table_name=True)
        assert store.resolve_table("a") == store.resolve_table("b") == "events"

    def test_custom_strategy_wins(self) -> None:
        store = _store(table_name=lambda prefix, ns: f"{ns}-{prefix}", use_prefix_as_table_name=True)
        assert store.resolve_table("acme") == "acme-events"

    def test_custom_default_namespace(self) -> None:
        assert _store(default_namespace="main").resolve_table() == "events_main"

    def test_namespaced_table_name(self) -> None:
        assert namespaced_table_name("p", "ns") == "p_ns"


# ---------------------------------------------------------------------------
# Save / Load
# ---------------------------------------------------------------------------


class TestSaveAndLoad:
    def test_three_events_then_stale_fourth(self) -> None:
        async def run() -> tuple[list[Event], list[Event]]:
            store = await _ready_store()
            await store.save(_batch("X", 1, 3), 0)
            first = await store.load("X")
            with pytest.raises(ConcurrencyConflictError) as info:
                await store.save([_paid("X", 3)], 2)
            assert info.value.version == 3
            return first, await store.load("X")

        first, after = asyncio.run(run())
        assert [e.version for e in first] == [1, 2, 3]
        assert [e.version for e in after] == [1, 2, 3]
        assert all(e.event_type == "OrderCreated" for e in after)

    def test_round_trip(self) -> None:
        async def run() -> list[Event]:
            store = await _ready_store()
            await store.save([_created("X", 1), _paid("X", 2)], 0)
            return await store.load("X")

        loaded = asyncio.run(run())
        assert loaded == [_created("X", 1), _paid("X", 2)]
        assert isinstance(loaded[1].data.amount, float)

    def test_event_without_payload(self) -> None:
        async def run() -> tuple[list[Event], FakeDynamoDBClient]:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            await store.save([Event.new("OrderClosed", None, "Order", "X", 1, clock=_CLOCK)], 0)
            return await store.load("X"), client

        loaded, client = asyncio.run(run())
        assert loaded[0].data is None
        assert "RawData" not in client.raw_items("events_default")[0]

    def test_append_to_existing_stream(self) -> None:
        async def run() -> list[Event]:
            store = await _ready_store()
            await store.save(_batch("X", 1, 2), 0)
            await store.save([_paid("X", 3), _paid("X", 4)], 2)
            return await store.load("X")

        assert [e.version for e in asyncio.run(run())] == [1, 2, 3, 4]

    def test_load_uses_consistent_ascending_query(self) -> None:
        async def run() -> FakeDynamoDBClient:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            await store.load("X")
            return client

        params = asyncio.run(run()).calls_to("query")[0]
        assert params["ConsistentRead"] is True
        assert params["KeyConditionExpression"] == "#aid = :aid"

    def test_load_unknown_aggregate(self) -> None:
        async def run() -> list[Event]:
            return await (await _ready_store()).load("nobody")

        assert asyncio.run(run()) == []

    def test_load_from_missing_table_is_empty(self) -> None:
        assert asyncio.run(_store().load("X", namespace="never-created")) == []

    def test_load_is_paginated(self) -> None:
        async def run() -> tuple[list[Event], FakeDynamoDBClient]:
            client = FakeDynamoDBClient(page_size=3)
            store = await _ready_store(client)
            await store.save(_batch("X", 1, 8), 0)
            return await store.load("X"), client

        loaded, client = asyncio.run(run())
        assert [e.version for e in loaded] == list(range(1, 9))
        assert len(client.calls_to("query")) == 3

    def test_load_all(self) -> None:
        async def run() -> list[Event]:
            store = await _ready_store()
            await store.save(_batch("X", 1, 2), 0)
            await store.save(_batch("Y", 1, 1), 0)
            return await store.load_all()

        events = asyncio.run(run())
        assert sorted((str(e.aggregate_id), e.version) for e in events) == [("X", 1), ("X", 2), ("Y", 1)]

    def test_load_all_missing_table_is_storage_error(self) -> None:
        with pytest.raises(StorageError):
            asyncio.run(_store().load_all(namespace="never-created"))

    def test_unregistered_type_loads_without_data(self) -> None:
        async def run() -> list[Event]:
            client = FakeDynamoDBClient()
            writer = await _ready_store(client)
            await writer.save(_batch("X", 1, 1), 0)
            reader = DynamoEventStore(
                EventStoreConfig(client=client, registry=EventDataRegistry(), table_prefix="events")
            )
            return await reader.load("X")

        event = asyncio.run(run())[0]
        assert event.data is None
        assert event.event_type == "OrderCreated"
        assert event.metadata == {"user": "u-1"}
        assert event.timestamp == _T0

    def test_corrupt_record_fails_decoding(self) -> None:
        async def run() -> None:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            client.put_raw(
                "events_default",
                {
                    "AggregateID": {"S": "X"},
                    "Version": {"N": "1"},
                    "EventType": {"S": "OrderPaid"},
                    "Timestamp": {"S": _T0.isoformat()},
                    "RawData": {"M": {"amount": {"S": "lots"}}},
                },
            )
            await store.load("X")

        with pytest.raises(EventDecodingError):
            asyncio.run(run())


class TestSaveValidation:
    def test_empty_batch(self) -> None:
        with pytest.raises(NoEventsError):
            asyncio.run(_store().save([], 0))

    def test_gap_persists_nothing(self) -> None:
        async def run() -> tuple[list[Event], FakeDynamoDBClient]:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            with pytest.raises(IncorrectVersionError):
                await store.save([_created("X", 1), _created("X", 3)], 0)
            return await store.load("X"), client

        loaded, client = asyncio.run(run())
        assert loaded == []
        assert client.calls_to("put_item") == []

    def test_out_of_order_rejected(self) -> None:
        with pytest.raises(IncorrectVersionError):
            asyncio.run(_store().save([_created("X", 2), _created("X", 1)], 0))

    def test_mixed_aggregates_rejected(self) -> None:
        with pytest.raises(InvalidEventError):
            asyncio.run(_store().save([_created("X", 1), _created("Y", 2)], 0))

    def test_errors_carry_namespace(self) -> None:
        with pytest.raises(NoEventsError) as info:
            asyncio.run(_store().save([], 0, namespace="acme"))
        assert info.value.namespace == "acme"


class TestVersionContiguity:
    @settings(max_examples=30, deadline=None)
    @given(event_batch_strategy(event_types=_UNREGISTERED, max_size=6))
    def test_valid_batch_loads_back_in_order(self, batch: list[Event]) -> None:
        async def run() -> tuple[list[Event], list[dict[str, Any]]]:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            await store.save(batch, 0)
            return await store.load(batch[0].aggregate_id), client.items("events_default")

        loaded, items = asyncio.run(run())
        assert [e.version for e in loaded] == list(range(1, len(batch) + 1))
        assert [e.event_type for e in loaded] == [e.event_type for e in batch]
        assert {e.aggregate_id for e in loaded} == {batch[0].aggregate_id}
        assert [plain(item["RawData"]) for item in items] == [e.data for e in batch]

    @settings(max_examples=30, deadline=None)
    @given(event_batch_strategy(event_types=_UNREGISTERED, max_size=6), st.integers(min_value=1, max_value=4))
    def test_shifted_base_writes_nothing(self, batch: list[Event], shift: int) -> None:
        async def run() -> tuple[list[Event], FakeDynamoDBClient]:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            with pytest.raises(IncorrectVersionError):
                await store.save(batch, shift)
            return await store.load(batch[0].aggregate_id), client

        loaded, client = asyncio.run(run())
        assert loaded == []
        assert client.calls_to("put_item") == []

    @settings(max_examples=30, deadline=None)
    @given(event_batch_strategy(event_types=_UNREGISTERED, max_size=6).filter(lambda b: len(b) > 1), st.data())
    def test_reordered_batch_writes_nothing(self, batch: list[Event], data: st.DataObject) -> None:
        shuffled = data.draw(st.permutations(batch).filter(lambda p: p != batch))

        async def run() -> tuple[list[Event], FakeDynamoDBClient]:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            with pytest.raises(IncorrectVersionError):
                await store.save(shuffled, 0)
            return await store.load(batch[0].aggregate_id), client

        loaded, client = asyncio.run(run())
        assert loaded == []
        assert client.calls_to("put_item") == []


class TestConcurrency:
    def test_racing_batches_have_one_winner(self) -> None:
        async def run() -> tuple[list[Any], list[Event]]:
            store = await _ready_store()
            a = [_created("X", 1, "alice"), _created("X", 2, "alice")]
            b = [_created("X", 1, "bob"), _created("X", 2, "bob")]
            results = await asyncio.gather(store.save(a, 0), store.save(b, 0), return_exceptions=True)
            return results, await store.load("X")

        results, loaded = asyncio.run(run())
        winners = [r for r in results if r is None]
        losers = [r for r in results if isinstance(r, ConcurrencyConflictError)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert losers[0].version == 1
        assert len(loaded) == 2
        assert len({e.data.customer for e in loaded}) == 1

    def test_conflict_mid_batch_keeps_prefix(self) -> None:
        async def run() -> list[Event]:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            await store.save(_batch("X", 1, 2), 0)
            await store.save(_batch("X", 3, 4), 2)
            with pytest.raises(ConcurrencyConflictError) as info:
                await store.save([_paid("X", 3), _paid("X", 4)], 2)
            assert info.value.version == 3
            return await store.load("X")

        assert [e.event_type for e in asyncio.run(run())] == ["OrderCreated"] * 4

    def test_partial_batch_on_interior_conflict(self) -> None:
        async def run() -> list[Event]:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            await store.save(_batch("X", 1, 2), 0)
            client.put_raw(
                "events_default",
                {
                    "AggregateID": {"S": "X"},
                    "Version": {"N": "4"},
                    "EventType": {"S": "OrderPaid"},
                    "Timestamp": {"S": _T0.isoformat()},
                    "RawData": {"M": {"amount": {"N": "1"}, "method": {"S": "cash"}}},
                },
            )
            with pytest.raises(ConcurrencyConflictError) as info:
                await store.save([_paid("X", 3), _paid("X", 4), _paid("X", 5)], 2)
            assert info.value.version == 4
            return await store.load("X")

        loaded = asyncio.run(run())
        assert [e.version for e in loaded] == [1, 2, 3, 4]
        assert loaded[2].data == OrderPaid(amount=9.5)
        assert loaded[3].data == OrderPaid(amount=1.0, method="cash")

    def test_partial_batch_on_encoding_failure(self) -> None:
        async def run() -> list[Event]:
            store = await _ready_store()
            bad = Event.new("Broken", {"value": object()}, "Order", "X", 2, clock=_CLOCK)
            with pytest.raises(EventEncodingError):
                await store.save([_created("X", 1), bad, _created("X", 3)], 0)
            return await store.load("X")

        assert [e.version for e in asyncio.run(run())] == [1]

    def test_empty_set_fails_encoding_not_storage(self) -> None:
        async def run() -> tuple[list[Event], FakeDynamoDBClient]:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            tagged = Event.new("Tagged", {"tags": set()}, "Order", "X", 2, clock=_CLOCK)
            with pytest.raises(EventEncodingError) as info:
                await store.save([_created("X", 1), tagged], 0)
            assert info.value.namespace == "default"
            return await store.load("X"), client

        loaded, client = asyncio.run(run())
        assert [e.version for e in loaded] == [1]
        assert len(client.calls_to("put_item")) == 1

    def test_storage_failure_is_reported(self) -> None:
        async def run() -> list[Event]:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            client.fail_next("put_item", "ProvisionedThroughputExceededException", skip=1)
            with pytest.raises(StorageError) as info:
                await store.save(_batch("X", 1, 3), 0)
            assert info.value.retryable is True
            return await store.load("X")

        assert [e.version for e in asyncio.run(run())] == [1]


# ---------------------------------------------------------------------------
# Downstream handler
# ---------------------------------------------------------------------------


class TestEventHandler:
    def test_called_once_per_event_in_order(self) -> None:
        handler = RecordingEventHandler()

        async def run() -> None:
            store = await _ready_store(event_handler=handler)
            await store.save(_batch("X", 1, 3), 0)

        asyncio.run(run())
        assert [e.version for e in handler.handled] == [1, 2, 3]

    def test_not_called_when_save_fails(self) -> None:
        handler = RecordingEventHandler()

        async def run() -> None:
            store = await _ready_store(event_handler=handler)
            await store.save(_batch("X", 1, 1), 0)
            handler.clear()
            with pytest.raises(ConcurrencyConflictError):
                await store.save(_batch("X", 1, 2), 0)

        asyncio.run(run())
        assert handler.handled == []

    def test_failure_leaves_events_stored(self) -> None:
        handler = RecordingEventHandler(fail_on=1)

        async def run() -> list[Event]:
            client = FakeDynamoDBClient()
            store = _store(client, event_handler=handler)
            await store.create_table(namespace="acme")
            with pytest.raises(EventHandlerError) as info:
                await store.save(_batch("X", 1, 3), 0, namespace="acme")
            assert info.value.event.version == 2
            assert info.value.namespace == "acme"
            assert isinstance(info.value.__cause__, RuntimeError)
            return await store.load("X", namespace="acme")

        assert len(asyncio.run(run())) == 3
        assert handler.calls == 2


# ---------------------------------------------------------------------------
# Replace / Rename
# ---------------------------------------------------------------------------


class TestReplace:
    def test_unknown_aggregate(self) -> None:
        async def run() -> None:
            store = await _ready_store()
            await store.replace(_created("X", 1))

        with pytest.raises(AggregateNotFoundError):
            asyncio.run(run())

    def test_overwrites_in_place(self) -> None:
        later = FrozenClock(_T0)
        later.advance(hours=1)

        async def run() -> list[Event]:
            store = await _ready_store()
            await store.save(_batch("X", 1, 2), 0)
            fixed = Event.new(
                "OrderCreated",
                OrderCreated(customer="fixed", total=1.0),
                "Order",
                "X",
                2,
                metadata={"reason": "gdpr"},
                clock=later,
            )
            await store.replace(fixed)
            return await store.load("X")

        loaded = asyncio.run(run())
        assert len(loaded) == 2
        assert loaded[1].data == OrderCreated(customer="fixed", total=1.0)
        assert loaded[1].metadata == {"reason": "gdpr"}
        assert loaded[1].timestamp == later.now()
        assert loaded[0] == _created("X", 1)

    def test_missing_version_of_existing_aggregate(self) -> None:
        async def run() -> None:
            store = await _ready_store()
            await store.save(_batch("X", 1, 1), 0)
            await store.replace(_created("X", 9))

        with pytest.raises(EventNotFoundError):
            asyncio.run(run())

    def test_unencodable_replacement(self) -> None:
        async def run() -> None:
            store = await _ready_store()
            await store.save(_batch("X", 1, 1), 0)
            await store.replace(Event.new("OrderCreated", "oops", "Order", "X", 1))

        with pytest.raises(EventEncodingError):
            asyncio.run(run())


class TestRenameEvent:
    def test_renames_only_matching_records(self) -> None:
        async def run() -> tuple[int, list[Event], list[Event]]:
            store = await _ready_store()
            await store.save(_batch("A", 1, 3), 0)
            await store.save([_paid("A", 4)], 3)
            await store.save(_batch("B", 1, 2) + [_paid("B", 3)], 0)
            before = await store.load_all()
            renamed = await store.rename_event("OrderCreated", "OrderPlaced")
            return renamed, before, await store.load_all()

        renamed, before, after = asyncio.run(run())
        assert renamed == 5
        key = lambda e: (str(e.aggregate_id), e.version)  # noqa: E731
        before_by_key = {key(e): e for e in before}
        placed = [e for e in after if e.event_type == "OrderPlaced"]
        assert len(placed) == 5
        assert not [e for e in after if e.event_type == "OrderCreated"]
        assert len([e for e in after if e.event_type == "OrderPaid"]) == 2
        for event in placed:
            assert event.data == before_by_key[key(event)].data

    def test_second_run_is_a_no_op(self) -> None:
        async def run() -> tuple[int, int, FakeDynamoDBClient]:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            await store.save(_batch("A", 1, 3), 0)
            first = await store.rename_event("OrderCreated", "OrderPlaced")
            updates = len(client.calls_to("update_item"))
            second = await store.rename_event("OrderCreated", "OrderPlaced")
            assert len(client.calls_to("update_item")) == updates
            return first, second, client

        first, second, client = asyncio.run(run())
        assert (first, second) == (3, 0)
        assert [i["Version"] for i in client.items("events_default")] == [1, 2, 3]

    def test_rename_across_pages(self) -> None:
        async def run() -> int:
            store = await _ready_store(FakeDynamoDBClient(page_size=2))
            await store.save(_batch("A", 1, 5), 0)
            return await store.rename_event("OrderCreated", "OrderPlaced")

        assert asyncio.run(run()) == 5


# ---------------------------------------------------------------------------
# Namespaces, tables and deadlines
# ---------------------------------------------------------------------------


class TestNamespaces:
    def test_namespaces_use_separate_tables(self) -> None:
        async def run() -> tuple[FakeDynamoDBClient, list[Event], list[Event]]:
            client = FakeDynamoDBClient()
            store = _store(client)
            await store.create_table(namespace="a")
            await store.create_table(namespace="b")
            await store.save(_batch("X", 1, 2), 0, namespace="a")
            async with NamespaceContext.scoped("b"):
                await store.save(_batch("X", 1, 1), 0)
            return client, await store.load("X", namespace="a"), await store.load("X", namespace="b")

        client, in_a, in_b = asyncio.run(run())
        assert client.table_names() == ["events_a", "events_b"]
        assert len(in_a) == 2
        assert len(in_b) == 1

    def test_shared_table(self) -> None:
        async def run() -> FakeDynamoDBClient:
            client = FakeDynamoDBClient()
            store = _store(client, use_prefix_as_table_name=True)
            await store.create_table(namespace="a")
            await store.save(_batch("X", 1, 1), 0, namespace="a")
            await store.save(_batch("Y", 1, 1), 0, namespace="b")
            return client

        client = asyncio.run(run())
        assert client.table_names() == ["events"]
        assert len(client.items("events")) == 2

    def test_delete_table(self) -> None:
        async def run() -> FakeDynamoDBClient:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            await store.delete_table()
            await store.delete_table()
            return client

        assert asyncio.run(run()).table_names() == []


class TestDeadlines:
    def test_expired_deadline_writes_nothing(self) -> None:
        async def run() -> FakeDynamoDBClient:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            with pytest.raises(DeadlineExceededError) as info:
                await store.save(_batch("X", 1, 2), 0, deadline=Deadline.after(seconds=-1))
            assert info.value.detail["table"] == "events_default"
            return client

        assert asyncio.run(run()).items("events_default") == []

    def test_slow_backend_times_out(self) -> None:
        async def run() -> None:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            client.latency = 1.0
            await store.load("X", deadline=Deadline.after(seconds=0.05))

        with pytest.raises(DeadlineExceededError):
            asyncio.run(run())

    def test_ambient_deadline(self) -> None:
        async def run() -> None:
            client = FakeDynamoDBClient()
            store = await _ready_store(client)
            client.latency = 1.0
            async with DeadlineContext.scoped(Deadline.after(seconds=0.05)):
                await store.load_all()

        with pytest.raises(DeadlineExceededError):
            asyncio.run(run())
