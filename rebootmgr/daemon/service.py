"""
Control service — protocol handlers over one owned ControlState.

Every request is validated against its parameter model, then handled
under a single lock so the state has exactly one writer at a time.
Handler failures become error identifiers in the reply; nothing here
raises into the transport.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from pydantic import ValidationError

from rebootmgr.core.calendar import CalendarError, CalendarParser, parse_calendar
from rebootmgr.core.codecs import encode_strategy
from rebootmgr.core.config.paths import ConfigPaths
from rebootmgr.core.config.resolver import ConfigResolver
from rebootmgr.core.config.writer import ConfigWriter
from rebootmgr.core.errors import PersistError
from rebootmgr.core.models.enums import RebootMethod, RebootStrategy
from rebootmgr.core.models.state import ControlState
from rebootmgr.core.models.window import MaintenanceWindow
from rebootmgr.core.protocol import messages as m
from rebootmgr.daemon.scheduler import RebootScheduler, StateScheduler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """A handler refused a request; becomes the reply's error id."""

    def __init__(self, error_id: str, parameters: dict[str, Any] | None = None) -> None:
        self.error_id = error_id
        self.parameters = parameters or {}
        super().__init__(error_id)


def invalid_parameter(name: str) -> ServiceError:
    return ServiceError(m.ERROR_INVALID_PARAMETER, {"parameter": name})


class ControlService:
    """Serve protocol calls against ``state``.

    Args:
        state: The daemon's state; owned by this service from now on.
        writer: Persists strategy and window changes.
        scheduler: Records reboot requests and cancellations.
        calendar: Validates window starts from SetWindow.
    """

    def __init__(
        self,
        state: ControlState,
        writer: ConfigWriter,
        scheduler: RebootScheduler | None = None,
        calendar: CalendarParser = parse_calendar,
    ) -> None:
        self.state = state
        self.writer = writer
        self.scheduler = scheduler or StateScheduler()
        self.calendar = calendar
        self._lock = threading.Lock()
        self._handlers: dict[str, Callable[[Any], m.Message]] = {
            m.REBOOT: self._reboot,
            m.CANCEL: self._cancel,
            m.STATUS: self._status,
            m.FULL_STATUS: self._full_status,
            m.SET_STRATEGY: self._set_strategy,
            m.SET_WINDOW: self._set_window,
        }

    def handle(self, method: str, parameters: dict[str, Any] | None = None) -> m.Reply:
        """Dispatch one call and build its reply."""
        handler = self._handlers.get(method)
        if handler is None:
            logger.warning("Unknown method %s", method)
            return m.Reply(error=m.ERROR_METHOD_NOT_FOUND, parameters={"method": method})

        try:
            params = m.PARAMS[method].model_validate(parameters or {})
        except ValidationError as e:
            name = ".".join(str(p) for p in e.errors()[0]["loc"]) if e.errors() else ""
            logger.warning("Invalid parameter %r for %s", name, method)
            return m.Reply(error=m.ERROR_INVALID_PARAMETER, parameters={"parameter": name})

        with self._lock:
            try:
                result = handler(params)
            except ServiceError as e:
                logger.info("%s refused: %s", method, e.error_id)
                return m.Reply(error=e.error_id, parameters=e.parameters)

        logger.debug("%s -> %s", method, result)
        return m.Reply(parameters=result.to_wire())

    # ── Handlers ────────────────────────────────────────────────

    def _reboot(self, params: m.RebootParams) -> m.RebootResult:
        if params.method == RebootMethod.UNKNOWN:
            raise invalid_parameter("Reboot")

        if self.state.pending:
            pending = m.RebootResult(method=self.state.method, scheduled=self.state.reboot_time)
            raise ServiceError(m.ERROR_ALREADY_IN_PROGRESS, pending.to_wire())

        self.scheduler.request(self.state, params.method, params.force)
        return m.RebootResult(method=self.state.method, scheduled=self.state.reboot_time)

    def _cancel(self, params: m.Empty) -> m.CancelResult:
        return m.CancelResult(success=self.scheduler.cancel(self.state))

    def _status(self, params: m.Empty) -> m.StatusResult:
        state = self.state
        return m.StatusResult(
            status=state.status,
            reboot_time=state.reboot_time,
            method=state.method if state.pending else None,
        )

    def _full_status(self, params: m.Empty) -> m.FullStatusResult:
        state = self.state
        window = state.window
        return m.FullStatusResult(
            status=state.status,
            method=state.method if state.pending else None,
            reboot_time=state.reboot_time,
            strategy=state.strategy,
            window_start=window.start if window else "",
            window_duration=window.duration_seconds if window else 0,
        )

    def _set_strategy(self, params: m.SetStrategyParams) -> m.Empty:
        if params.strategy == RebootStrategy.UNKNOWN:
            raise invalid_parameter("Strategy")

        self._persist(lambda: self.writer.write_strategy(params.strategy))
        self.state.strategy = params.strategy
        logger.info("Reboot strategy set to %s", encode_strategy(params.strategy))
        return m.Empty()

    def _set_window(self, params: m.SetWindowParams) -> m.Empty:
        start = params.start.strip()
        window: MaintenanceWindow | None = None

        if start:
            try:
                self.calendar(start)
            except CalendarError:
                raise invalid_parameter("Start") from None
            if params.duration <= 0 or params.duration % 60:
                raise invalid_parameter("Duration")
            try:
                duration = timedelta(seconds=params.duration)
            except OverflowError:
                raise invalid_parameter("Duration") from None
            window = MaintenanceWindow(start=start, duration=duration)
        elif params.duration:
            raise invalid_parameter("Duration")

        self._persist(lambda: self.writer.write_window(window))
        self.state.window = window
        logger.info("Maintenance window set to %s",
                    f"{window.start} ({window.duration})" if window else "none")
        return m.Empty()

    def _persist(self, write: Callable[[], object]) -> None:
        try:
            write()
        except PersistError as e:
            raise ServiceError(m.ERROR_PERSIST_FAILED, {"reason": str(e)}) from e


def build_service(
    paths: ConfigPaths | None = None,
    scheduler: RebootScheduler | None = None,
    calendar: CalendarParser = parse_calendar,
) -> ControlService:
    """Resolve configuration and assemble the daemon's service.

    Raises:
        SourceMalformedError: If a configuration layer is malformed.
    """
    paths = paths or ConfigPaths.from_env()
    resolved = ConfigResolver(paths, calendar).resolve()
    state = ControlState.from_config(resolved)
    return ControlService(state, ConfigWriter(paths), scheduler, calendar)
