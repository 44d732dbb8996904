"""Exceptions raised by the image scheduler.

Each error carries a short ``code`` and a ``details`` dict so the service
layer can turn it into a structured response without parsing messages.
"""

from typing import Any


class ScheduleError(Exception):
    """Base class for scheduling errors.

    Subclasses set ``default_code``; callers may override it per raise.
    """

    default_code = "SCHEDULE_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code}] {self.message} {self.details}"
        return f"[{self.code}] {self.message}"


class ScheduleConfigError(ScheduleError):
    """A configuration value is not a number, or is NaN or infinite where
    a finite value is needed. Out-of-range numbers are clamped instead."""

    default_code = "INVALID_CONFIG"


class TimestampResolutionError(ScheduleError):
    """Malformed resolver input: mismatched fallback length (the default
    code) or a non-positive interval (``INVALID_INTERVAL``)."""

    default_code = "INVALID_TIMESTAMPS"


class SlotAssignmentError(ScheduleError):
    """The binding pass found no free slot on a stream it was told is feasible."""

    default_code = "SLOT_BINDING_FAILED"
