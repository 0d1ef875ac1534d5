"""Application layer – event-sourcing protocol independent of the backing store."""
