"""
Maintenance window — a recurring start expression plus a duration.
"""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, Field, field_validator

DEFAULT_WINDOW_DURATION = timedelta(hours=1)


class MaintenanceWindow(BaseModel):
    """A recurring time range during which a reboot may execute.

    ``start`` is a calendar expression, opaque to this package and only
    checked by the calendar collaborator. A window never exists without
    a start: callers holding a duration but no start must drop both.
    """

    start: str
    duration: timedelta = Field(default=DEFAULT_WINDOW_DURATION)

    @field_validator("start")
    @classmethod
    def _start_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("maintenance window start must not be empty")
        return value

    @field_validator("duration")
    @classmethod
    def _duration_not_negative(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            raise ValueError("maintenance window duration must not be negative")
        return value

    @property
    def duration_seconds(self) -> int:
        return int(self.duration.total_seconds())
