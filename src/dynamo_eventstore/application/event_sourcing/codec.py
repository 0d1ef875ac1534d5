"""Application event sourcing – EventCodec.

Converts :class:`~dynamo_eventstore.kernel.ddd.event.Event` objects to and
from :class:`EventRecord` values and DynamoDB wire items. This module is the
only place where domain payloads cross into DynamoDB's attribute
representation (``{"S": ...}``, ``{"N": ...}``, ``{"M": {...}}`` …).

Payload values
--------------
``str``, ``int``, ``bool``, ``None``, ``Decimal``, ``bytes`` and nested
``list`` / ``tuple`` / ``dict`` (string keys) / non-empty ``set`` map directly.
``float`` is stored as a DynamoDB number and ``datetime`` as an ISO-8601
string; both come back as their original type when the payload field is
annotated accordingly. Nested dataclasses, ``EntityId`` and ``Enum`` values
are supported too. Anything else is rejected with ``EventEncodingError``.
"""

from __future__ import annotations

import dataclasses
import enum
import math
import types
import typing
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Union

from boto3.dynamodb.types import Binary, TypeDeserializer, TypeSerializer

from dynamo_eventstore.application.event_sourcing.errors import (
    EventDecodingError,
    EventEncodingError,
)
from dynamo_eventstore.application.event_sourcing.record import EventRecord
from dynamo_eventstore.application.event_sourcing.registry import EventDataRegistry
from dynamo_eventstore.kernel.ddd.event import Event
from dynamo_eventstore.kernel.types.ids import EntityId
from dynamo_eventstore.observability.logging import get_logger

ATTR_AGGREGATE_ID = "AggregateID"
ATTR_VERSION = "Version"
ATTR_EVENT_TYPE = "EventType"
ATTR_RAW_DATA = "RawData"
ATTR_TIMESTAMP = "Timestamp"
ATTR_AGGREGATE_TYPE = "AggregateType"
ATTR_METADATA = "Metadata"

_log = get_logger(__name__)

_SERIALIZER = TypeSerializer()
_DESERIALIZER = TypeDeserializer()
_ENCODE_ERRORS = (TypeError, ValueError, ArithmeticError)


# ---------------------------------------------------------------------------
# Generic attribute-map helpers (shared with the read-model repository)
# ---------------------------------------------------------------------------


def to_attribute_map(values: Mapping[str, Any]) -> dict[str, Any]:
    """Encode *values* as a DynamoDB attribute map.

    Raises ``TypeError`` / ``ValueError`` / ``ArithmeticError`` for values
    DynamoDB cannot represent.
    """
    storable = _to_storable(values)
    return {key: _SERIALIZER.serialize(value) for key, value in storable.items()}


def from_attribute_map(attributes: Mapping[str, Any]) -> dict[str, Any]:
    """Decode a DynamoDB attribute map into Python values (numbers as ``Decimal``)."""
    return {key: _DESERIALIZER.deserialize(value) for key, value in attributes.items()}


def dataclass_fields(obj: Any) -> dict[str, Any]:
    """Shallow ``{field: value}`` view of a dataclass instance."""
    return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}


def build_dataclass(cls: type, values: Mapping[str, Any]) -> Any:
    """Instantiate dataclass *cls* from decoded attribute *values*.

    Values are coerced to the field annotations (``Decimal`` → ``int`` /
    ``float``, ISO string → ``datetime``, nested maps → nested dataclasses).
    Unknown or missing fields raise ``TypeError``; values that cannot take
    the annotated type raise ``ValueError``.
    """
    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints = {}
    kwargs = {name: _coerce(value, hints.get(name, Any)) for name, value in values.items()}
    return cls(**kwargs)


def plain(value: Any) -> Any:
    """Convert deserializer output to plain Python values.

    Integral numbers become ``int``, other numbers ``float``, binaries ``bytes``.
    """
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, Binary):
        return value.value
    if isinstance(value, dict):
        return {k: plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [plain(v) for v in value]
    if isinstance(value, set):
        return {plain(v) for v in value}
    return value


def _to_storable(value: Any) -> Any:
    if value is None or isinstance(value, (str, bool, int, Decimal, bytes, bytearray, Binary)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"non-finite float {value!r} cannot be stored")
        return Decimal(repr(value))
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, EntityId):
        return value.value
    if isinstance(value, enum.Enum):
        return _to_storable(value.value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {name: _to_storable(v) for name, v in dataclass_fields(value).items()}
    if isinstance(value, Mapping):
        result: dict[str, Any] = {}
        for key, v in value.items():
            if not isinstance(key, str):
                raise TypeError(f"map keys must be strings, got {type(key).__name__}")
            result[key] = _to_storable(v)
        return result
    if isinstance(value, (set, frozenset)):
        if not value:
            raise ValueError("empty sets cannot be stored in DynamoDB")
        return {_to_storable(v) for v in value}
    if isinstance(value, (list, tuple)):
        return [_to_storable(v) for v in value]
    raise TypeError(f"unsupported value of type {type(value).__name__}")


def _coerce(value: Any, hint: Any) -> Any:  # noqa: PLR0911, PLR0912
    if value is None:
        return None
    if hint is Any or hint is object:
        return plain(value)

    origin = typing.get_origin(hint)
    args = typing.get_args(hint)
    if origin is Union or origin is types.UnionType:
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) == 1:
            return _coerce(value, non_none[0])
        return plain(value)
    if origin in (list, set, frozenset):
        if not isinstance(value, (list, set)):
            raise ValueError(f"expected a sequence for {hint}, got {type(value).__name__}")
        item_hint = args[0] if args else Any
        return origin(_coerce(v, item_hint) for v in value)
    if origin is tuple:
        if not isinstance(value, list):
            raise ValueError(f"expected a list for {hint}, got {type(value).__name__}")
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            item_hint = args[0] if args else Any
            return tuple(_coerce(v, item_hint) for v in value)
        if len(args) != len(value):
            raise ValueError(f"expected {len(args)} items for {hint}, got {len(value)}")
        return tuple(_coerce(v, h) for v, h in zip(value, args))
    if origin is dict:
        if not isinstance(value, dict):
            raise ValueError(f"expected a map for {hint}, got {type(value).__name__}")
        value_hint = args[1] if len(args) == 2 else Any
        return {k: _coerce(v, value_hint) for k, v in value.items()}
    if origin is not None or not isinstance(hint, type):
        return plain(value)

    if issubclass(hint, bool):
        if not isinstance(value, bool):
            raise ValueError(f"expected a boolean, got {type(value).__name__}")
        return value
    if issubclass(hint, EntityId):
        return hint(str(value))
    if issubclass(hint, enum.Enum):
        return hint(plain(value))
    if issubclass(hint, int):
        if not isinstance(value, Decimal) or value != value.to_integral_value():
            raise ValueError(f"expected an integer, got {value!r}")
        return hint(value)
    if issubclass(hint, Decimal):
        if not isinstance(value, Decimal):
            raise ValueError(f"expected a number, got {type(value).__name__}")
        return value
    if issubclass(hint, float):
        if not isinstance(value, Decimal):
            raise ValueError(f"expected a number, got {type(value).__name__}")
        return hint(value)
    if issubclass(hint, str):
        if not isinstance(value, str):
            raise ValueError(f"expected a string, got {type(value).__name__}")
        return value
    if issubclass(hint, (bytes, bytearray)):
        if not isinstance(value, Binary):
            raise ValueError(f"expected binary, got {type(value).__name__}")
        return hint(value.value)
    if issubclass(hint, datetime):
        if not isinstance(value, str):
            raise ValueError(f"expected an ISO-8601 string, got {type(value).__name__}")
        return datetime.fromisoformat(value)
    if dataclasses.is_dataclass(hint):
        if not isinstance(value, dict):
            raise ValueError(f"expected a map for {hint.__name__}, got {type(value).__name__}")
        return build_dataclass(hint, value)
    if hint in (list, tuple, set, frozenset, dict):
        return hint(plain(value))
    return plain(value)


# ---------------------------------------------------------------------------
# EventCodec
# ---------------------------------------------------------------------------


class EventCodec:
    """Event ⇄ :class:`EventRecord` ⇄ DynamoDB item.

    Decoding dispatches on the record's type tag through *registry*. A tag
    with no registered class decodes to an event with ``data=None``, so
    records of retired event types can still be replayed.
    """

    def __init__(self, registry: EventDataRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> EventDataRegistry:
        return self._registry

    def encode(self, event: Event, *, namespace: str | None = None) -> EventRecord:
        raw_data: dict[str, Any] | None = None
        if event.data is not None:
            data = event.data
            if dataclasses.is_dataclass(data) and not isinstance(data, type):
                data = dataclass_fields(data)
            elif not isinstance(data, Mapping):
                raise EventEncodingError(
                    f"payload of {event} must be a dataclass instance or a mapping, "
                    f"got {type(data).__name__}",
                    namespace=namespace,
                    payload_type=event.event_type,
                )
            try:
                raw_data = to_attribute_map(data)
            except _ENCODE_ERRORS as exc:
                raise EventEncodingError(
                    f"could not marshal payload of {event}: {exc}",
                    namespace=namespace,
                    payload_type=event.event_type,
                    cause=exc,
                ) from exc

        try:
            raw_metadata = to_attribute_map(event.metadata)
        except _ENCODE_ERRORS as exc:
            raise EventEncodingError(
                f"could not marshal metadata of {event}: {exc}",
                namespace=namespace,
                payload_type=event.event_type,
                cause=exc,
            ) from exc

        return EventRecord(
            aggregate_id=str(event.aggregate_id),
            version=event.version,
            event_type=event.event_type,
            timestamp=event.timestamp,
            aggregate_type=event.aggregate_type,
            raw_data=raw_data,
            raw_metadata=raw_metadata,
        )

    def decode(self, record: EventRecord, *, namespace: str | None = None) -> Event:
        data: Any | None = None
        data_cls = self._registry.lookup(record.event_type)
        if data_cls is None:
            if record.raw_data is not None:
                _log.debug(
                    "event_codec.unregistered_type",
                    event_type=record.event_type,
                    aggregate_id=record.aggregate_id,
                    version=record.version,
                )
        elif record.raw_data is not None:
            try:
                data = build_dataclass(data_cls, from_attribute_map(record.raw_data))
            except (TypeError, ValueError, ArithmeticError) as exc:
                raise EventDecodingError(
                    f"could not unmarshal {record.event_type}@{record.version} "
                    f"into {data_cls.__qualname__}: {exc}",
                    namespace=namespace,
                    payload_type=record.event_type,
                    cause=exc,
                ) from exc

        try:
            metadata = plain(from_attribute_map(record.raw_metadata))
        except (TypeError, ValueError) as exc:
            raise EventDecodingError(
                f"could not unmarshal metadata of {record.event_type}@{record.version}: {exc}",
                namespace=namespace,
                payload_type=record.event_type,
                cause=exc,
            ) from exc

        return Event(
            event_type=record.event_type,
            aggregate_id=EntityId(record.aggregate_id),
            version=record.version,
            aggregate_type=record.aggregate_type,
            data=data,
            timestamp=record.timestamp,
            metadata=metadata,
        )

    @staticmethod
    def to_item(record: EventRecord) -> dict[str, Any]:
        """Return the DynamoDB item for *record*; ``RawData`` is omitted when empty."""
        item: dict[str, Any] = {
            ATTR_AGGREGATE_ID: {"S": record.aggregate_id},
            ATTR_VERSION: {"N": str(record.version)},
            ATTR_EVENT_TYPE: {"S": record.event_type},
            ATTR_TIMESTAMP: {"S": record.timestamp.isoformat()},
            ATTR_AGGREGATE_TYPE: {"S": record.aggregate_type},
            ATTR_METADATA: {"M": record.raw_metadata},
        }
        if record.raw_data is not None:
            item[ATTR_RAW_DATA] = {"M": record.raw_data}
        return item

    @staticmethod
    def from_item(item: Mapping[str, Any], *, namespace: str | None = None) -> EventRecord:
        try:
            raw_data = item.get(ATTR_RAW_DATA)
            return EventRecord(
                aggregate_id=item[ATTR_AGGREGATE_ID]["S"],
                version=int(item[ATTR_VERSION]["N"]),
                event_type=item[ATTR_EVENT_TYPE]["S"],
                timestamp=datetime.fromisoformat(item[ATTR_TIMESTAMP]["S"]),
                aggregate_type=item.get(ATTR_AGGREGATE_TYPE, {}).get("S", ""),
                raw_data=raw_data["M"] if raw_data is not None else None,
                raw_metadata=item.get(ATTR_METADATA, {}).get("M", {}),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise EventDecodingError(
                f"malformed event item: {exc!r}", namespace=namespace, cause=exc
            ) from exc


__all__ = [
    "ATTR_AGGREGATE_ID",
    "ATTR_AGGREGATE_TYPE",
    "ATTR_EVENT_TYPE",
    "ATTR_METADATA",
    "ATTR_RAW_DATA",
    "ATTR_TIMESTAMP",
    "ATTR_VERSION",
    "EventCodec",
    "build_dataclass",
    "dataclass_fields",
    "from_attribute_map",
    "plain",
    "to_attribute_map",
]
