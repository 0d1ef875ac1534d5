"""Resilience – Deadline and its propagation via contextvars."""
from dynamo_eventstore.resilience.deadline.context import (
    DeadlineContext,
    DeadlineExceededError,
    deadline_aware,
)
from dynamo_eventstore.resilience.deadline.deadline import Deadline

__all__ = ["Deadline", "DeadlineContext", "DeadlineExceededError", "deadline_aware"]
