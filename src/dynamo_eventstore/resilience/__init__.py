"""Resilience – deadline propagation for store calls."""
from dynamo_eventstore.resilience.deadline import (
    Deadline,
    DeadlineContext,
    DeadlineExceededError,
    deadline_aware,
)

__all__ = ["Deadline", "DeadlineContext", "DeadlineExceededError", "deadline_aware"]
