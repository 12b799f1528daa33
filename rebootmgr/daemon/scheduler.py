"""
Scheduler — decides the disposition of an accepted reboot request.

The loop that later wakes up and actually reboots the host lives
outside this package. What the daemon needs from the scheduler is the
bookkeeping when a request arrives or is cancelled; ``StateScheduler``
provides exactly that by recording the request on the ControlState.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

from rebootmgr.core.codecs import describe_method
from rebootmgr.core.models.enums import RebootMethod, RebootStrategy
from rebootmgr.core.models.state import ControlState

logger = logging.getLogger(__name__)


class RebootScheduler(Protocol):
    """Collaborator that owns status, method and reboot time."""

    def request(self, state: ControlState, method: RebootMethod, force: bool) -> None: ...

    def cancel(self, state: ControlState) -> bool: ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StateScheduler:
    """Record requests on the state for the executor to act on.

    A maint-window strategy with a configured window defers the reboot
    to the window unless forced; everything else is due immediately.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self.clock = clock

    def request(self, state: ControlState, method: RebootMethod, force: bool) -> None:
        waiting = (
            not force
            and state.strategy == RebootStrategy.MAINT_WINDOW
            and state.window is not None
        )
        if waiting:
            reboot_time = state.window.start  # type: ignore[union-attr]
        else:
            reboot_time = self.clock().isoformat(timespec="seconds")

        if state.strategy == RebootStrategy.OFF and not force:
            logger.warning("Reboot strategy is off; %s recorded but will not run", describe_method(method))

        state.mark_requested(method, reboot_time, waiting_window=waiting)
        logger.info("Scheduled %s for %s%s", describe_method(method), reboot_time,
                    " (waiting for maintenance window)" if waiting else "")

    def cancel(self, state: ControlState) -> bool:
        if not state.pending:
            logger.info("Cancel requested but no reboot is pending")
            return False
        logger.info("Cancelled pending %s", describe_method(state.method))
        state.clear_request()
        return True
