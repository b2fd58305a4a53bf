from __future__ import annotations

from typing import Any


class TimebillError(Exception):
    """Base class for domain errors raised by the timebill core."""


class ValidationError(TimebillError, ValueError):
    pass


class InvalidTimeError(ValidationError):
    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid time {value!r}; expected HH:MM")


class NotFoundError(TimebillError, LookupError):
    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found")


class ConflictError(TimebillError):
    pass
