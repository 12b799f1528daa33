"""
ControlState — the daemon's in-memory view of reboot policy and status.

Built once at startup from resolved configuration and then owned by
the daemon's control service. Strategy and window change only through
set requests (after they are persisted); status, method and reboot
time change only through the scheduler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from rebootmgr.core.models.enums import RebootMethod, RebootStatus, RebootStrategy
from rebootmgr.core.models.window import MaintenanceWindow

if TYPE_CHECKING:
    from rebootmgr.core.config.resolver import ResolvedConfig


class ControlState(BaseModel):
    """Current strategy, maintenance window and reboot disposition."""

    # ── Configuration-backed ─────────────────────────────────────
    strategy: RebootStrategy = RebootStrategy.BEST_EFFORT
    window: MaintenanceWindow | None = None

    # ── Runtime only ─────────────────────────────────────────────
    status: RebootStatus = RebootStatus.NOT_REQUESTED
    method: RebootMethod = RebootMethod.UNKNOWN
    reboot_time: str | None = None

    @classmethod
    def from_config(cls, config: ResolvedConfig) -> ControlState:
        """Seed a fresh state from resolved configuration."""
        return cls(strategy=config.strategy.value, window=config.window)

    @property
    def pending(self) -> bool:
        """True while a reboot request is outstanding."""
        return self.status != RebootStatus.NOT_REQUESTED

    def mark_requested(
        self,
        method: RebootMethod,
        reboot_time: str | None,
        waiting_window: bool = False,
    ) -> None:
        """Record an accepted reboot request."""
        self.status = RebootStatus.WAITING_WINDOW if waiting_window else RebootStatus.REQUESTED
        self.method = method
        self.reboot_time = reboot_time

    def clear_request(self) -> None:
        """Forget any outstanding reboot request."""
        self.status = RebootStatus.NOT_REQUESTED
        self.method = RebootMethod.UNKNOWN
        self.reboot_time = None
