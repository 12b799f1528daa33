"""
Protocol messages — one typed model per request and reply.

Wire names are the PascalCase aliases; Python code uses the snake_case
field names. A required field is a mandatory one: decoding a reply
without it fails. Unknown extra fields are tolerated so older clients
keep working against newer daemons.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rebootmgr.core.models.enums import RebootMethod, RebootStatus, RebootStrategy

INTERFACE = "org.openSUSE.rebootmgr"


def method_name(short: str) -> str:
    return f"{INTERFACE}.{short}"


# ── Method names ────────────────────────────────────────────────────

REBOOT = method_name("Reboot")
CANCEL = method_name("Cancel")
STATUS = method_name("Status")
FULL_STATUS = method_name("FullStatus")
SET_STRATEGY = method_name("SetStrategy")
SET_WINDOW = method_name("SetWindow")

# ── Error identifiers ───────────────────────────────────────────────

ERROR_ALREADY_IN_PROGRESS = method_name("AlreadyInProgress")
ERROR_PERSIST_FAILED = method_name("PersistFailed")
ERROR_METHOD_NOT_FOUND = "org.varlink.service.MethodNotFound"
ERROR_INVALID_PARAMETER = "org.varlink.service.InvalidParameter"


class Message(BaseModel):
    """Base for all parameter and result objects."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Empty(Message):
    """Parameters or result of a method that carries none."""


# ── Reboot ──────────────────────────────────────────────────────────


class RebootParams(Message):
    method: RebootMethod = Field(alias="Reboot")
    force: bool = Field(default=False, alias="Force")


class RebootResult(Message):
    method: RebootMethod | None = Field(default=None, alias="Method")
    scheduled: str | None = Field(default=None, alias="Scheduled")


# ── Cancel ──────────────────────────────────────────────────────────


class CancelResult(Message):
    success: bool = Field(alias="Success")


# ── Status ──────────────────────────────────────────────────────────


class StatusResult(Message):
    status: RebootStatus = Field(alias="RebootStatus")
    reboot_time: str | None = Field(default=None, alias="RebootTime")
    method: RebootMethod | None = Field(default=None, alias="RequestedMethod")


class FullStatusResult(Message):
    status: RebootStatus = Field(alias="RebootStatus")
    method: RebootMethod | None = Field(default=None, alias="RequestedMethod")
    reboot_time: str | None = Field(default=None, alias="RebootTime")
    strategy: RebootStrategy = Field(alias="RebootStrategy")
    window_start: str = Field(alias="MaintenanceWindowStart")
    window_duration: int = Field(alias="MaintenanceWindowDuration", ge=0)


# ── Set requests ────────────────────────────────────────────────────


class SetStrategyParams(Message):
    strategy: RebootStrategy = Field(alias="Strategy")


class SetWindowParams(Message):
    start: str = Field(alias="Start")
    duration: int = Field(default=0, alias="Duration", ge=0)


# ── Envelope ────────────────────────────────────────────────────────


class Reply(BaseModel):
    """One call's outcome: parameters, plus an error id on failure."""

    parameters: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return bool(self.error)

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {"parameters": self.parameters}
        if self.error:
            body["error"] = self.error
        return body


# Parameter model of each method, for daemon-side validation
PARAMS: dict[str, type[Message]] = {
    REBOOT: RebootParams,
    CANCEL: Empty,
    STATUS: Empty,
    FULL_STATUS: Empty,
    SET_STRATEGY: SetStrategyParams,
    SET_WINDOW: SetWindowParams,
}
