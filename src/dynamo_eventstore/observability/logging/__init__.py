"""Observability – structlog configuration and helpers."""
from dynamo_eventstore.observability.logging.factory import JsonLoggerFactory
from dynamo_eventstore.observability.logging.filters import SensitiveFieldsFilter
from dynamo_eventstore.observability.logging.processors import NamespaceProcessor, get_logger

__all__ = [
    "JsonLoggerFactory",
    "NamespaceProcessor",
    "SensitiveFieldsFilter",
    "get_logger",
]
