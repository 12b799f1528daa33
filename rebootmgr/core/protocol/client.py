"""
Client — typed calls against the rebootmgr daemon.

Each method performs exactly one call on a fresh connection and decodes
the reply into its result model. Errors surface as:

    CallError             the call itself failed (no state change assumed)
    ProtocolError         the daemon replied with an error identifier
    ProtocolDecodeError   the reply lacks a mandatory field or is malformed
    RequestValidationError  a set request was rejected before calling

The one daemon error that is not a failure is AlreadyInProgress on
Reboot: it is reported through ``RebootOutcome.already_scheduled``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import ValidationError

from rebootmgr.core.calendar import CalendarError, CalendarParser, parse_calendar
from rebootmgr.core.codecs import decode_duration, decode_strategy, is_whole_minutes
from rebootmgr.core.errors import ProtocolDecodeError, ProtocolError, RequestValidationError
from rebootmgr.core.models.enums import RebootMethod, RebootStrategy
from rebootmgr.core.models.window import MaintenanceWindow
from rebootmgr.core.protocol import messages as m
from rebootmgr.core.protocol.transport import HttpTransport, Transport

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=m.Message)


@dataclass
class RebootOutcome:
    """What happened to a reboot request."""

    method: RebootMethod | None
    scheduled: str | None
    already_scheduled: bool = False


class RebootMgrClient:
    """Synchronous client for the control protocol.

    Args:
        transport: How calls reach the daemon (default: loopback HTTP).
        calendar: Validates window starts before SetWindow is sent.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        calendar: CalendarParser = parse_calendar,
    ) -> None:
        self.transport = transport or HttpTransport()
        self.calendar = calendar

    # ── Queries and commands ────────────────────────────────────

    def reboot(self, method: RebootMethod = RebootMethod.HARD, force: bool = False) -> RebootOutcome:
        """Ask the daemon to schedule a reboot."""
        params = m.RebootParams(method=method, force=force)
        reply = self.transport.call(m.REBOOT, params.to_wire())

        # Decode first: an AlreadyInProgress reply carries the pending request
        if reply.failed and reply.error != m.ERROR_ALREADY_IN_PROGRESS:
            raise ProtocolError(reply.error or "", reply.parameters)
        result = _decode(m.REBOOT, m.RebootResult, reply.parameters)

        if reply.failed:
            logger.info("Reboot already in progress, request ignored")
        return RebootOutcome(
            method=result.method,
            scheduled=result.scheduled,
            already_scheduled=reply.failed,
        )

    def cancel(self) -> bool:
        """Cancel a pending reboot. Returns whether one was cancelled."""
        return self._call(m.CANCEL, m.CancelResult).success

    def status(self) -> m.StatusResult:
        return self._call(m.STATUS, m.StatusResult)

    def full_status(self) -> m.FullStatusResult:
        return self._call(m.FULL_STATUS, m.FullStatusResult)

    def set_strategy(self, name: str) -> RebootStrategy:
        """Validate a strategy name and send it to the daemon.

        Raises:
            RequestValidationError: If ``name`` is not a known strategy.
        """
        decoded = decode_strategy(name)
        if not decoded.ok:
            raise RequestValidationError(f"Invalid reboot strategy '{name}'")

        params = m.SetStrategyParams(strategy=decoded.value)
        self._call(m.SET_STRATEGY, m.Empty, params.to_wire())
        return decoded.value

    def set_window(self, start: str, duration: str) -> MaintenanceWindow | None:
        """Validate and send a new maintenance window.

        An empty ``start`` together with an empty ``duration`` clears the
        window. Returns the window sent, or None when clearing.

        Raises:
            RequestValidationError: For a bad start or duration, or a
                duration without a start.
        """
        window = self.validate_window(start, duration)
        if window is None:
            params = m.SetWindowParams(start="", duration=0)
        else:
            params = m.SetWindowParams(start=window.start, duration=window.duration_seconds)
        self._call(m.SET_WINDOW, m.Empty, params.to_wire())
        return window

    def validate_window(self, start: str, duration: str) -> MaintenanceWindow | None:
        """Local checks for a SetWindow request; nothing is sent."""
        start = start.strip()
        if not start:
            if duration.strip():
                raise RequestValidationError("A maintenance window duration needs a start time")
            return None

        try:
            self.calendar(start)
        except CalendarError as e:
            raise RequestValidationError(f"Invalid time for maintenance window: {e}") from e

        decoded = decode_duration(duration)
        if not decoded.ok or not decoded.value:
            raise RequestValidationError(
                f"Invalid duration format for maintenance window: '{duration}'"
            )
        if not is_whole_minutes(decoded.value):
            raise RequestValidationError(
                f"Maintenance window duration must be whole minutes: '{duration}'"
            )
        return MaintenanceWindow(start=start, duration=decoded.value)

    # ── Internals ───────────────────────────────────────────────

    def _call(
        self,
        method: str,
        result_type: type[ResultT],
        parameters: dict[str, Any] | None = None,
    ) -> ResultT:
        reply = self.transport.call(method, parameters or {})
        if reply.failed:
            raise ProtocolError(reply.error or "", reply.parameters)
        return _decode(method, result_type, reply.parameters)


def _decode(method: str, result_type: type[ResultT], parameters: dict[str, Any]) -> ResultT:
    try:
        return result_type.model_validate(parameters)
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors() if err["type"] == "missing"]
        detail = f"missing mandatory field(s): {', '.join(missing)}" if missing else str(e)
        raise ProtocolDecodeError(method, detail) from e
