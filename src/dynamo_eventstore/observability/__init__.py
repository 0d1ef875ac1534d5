"""Observability – structured logging."""
from dynamo_eventstore.observability.logging import (
    JsonLoggerFactory,
    NamespaceProcessor,
    SensitiveFieldsFilter,
    get_logger,
)

__all__ = ["JsonLoggerFactory", "NamespaceProcessor", "SensitiveFieldsFilter", "get_logger"]
