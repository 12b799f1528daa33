"""
Domain models — reboot enumerations, maintenance window and control state.

    from rebootmgr.core.models import ControlState, RebootStrategy
"""

from rebootmgr.core.models.enums import RebootMethod, RebootStatus, RebootStrategy
from rebootmgr.core.models.state import ControlState
from rebootmgr.core.models.window import DEFAULT_WINDOW_DURATION, MaintenanceWindow

__all__ = [
    "DEFAULT_WINDOW_DURATION",
    # state.py
    "ControlState",
    # window.py
    "MaintenanceWindow",
    # enums.py
    "RebootMethod",
    "RebootStatus",
    "RebootStrategy",
]
