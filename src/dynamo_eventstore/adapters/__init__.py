"""Adapters – concrete backing stores for the event-sourcing ports."""
