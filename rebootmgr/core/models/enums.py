"""
Reboot enumerations shared by the client and the daemon.

The numeric values are part of the wire protocol: they travel as
integers in request and response parameters, and ``status --quiet``
uses the RebootStatus value as its exit code.
"""

from __future__ import annotations

from enum import IntEnum


class RebootStrategy(IntEnum):
    """Policy governing whether and when a reboot may execute."""

    UNKNOWN = -1  # not set / invalid, never persisted
    BEST_EFFORT = 0
    INSTANTLY = 1
    MAINT_WINDOW = 2
    OFF = 3


class RebootMethod(IntEnum):
    """Which reboot primitive the executor uses."""

    UNKNOWN = -1
    HARD = 0
    SOFT = 1


class RebootStatus(IntEnum):
    """Current disposition of the daemon. Runtime only."""

    NOT_REQUESTED = 0
    REQUESTED = 1
    WAITING_WINDOW = 2
