"""Config settings – Settings base class."""
from __future__ import annotations

import dataclasses
from typing import ClassVar


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings.

    ``_prefix`` namespaces the environment variables: a field ``region_name``
    on a class with ``_prefix = "eventstore"`` reads ``EVENTSTORE_REGION_NAME``.
    It is a class attribute, never an ``__init__`` argument, so subclasses may
    declare required fields.
    """

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


__all__ = ["Settings"]
