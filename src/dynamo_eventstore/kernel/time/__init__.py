"""Kernel time – Clock protocol + implementations."""
from dynamo_eventstore.kernel.time.clock import Clock, FrozenClock, SystemClock, utc_now

__all__ = ["Clock", "FrozenClock", "SystemClock", "utc_now"]
