"""
Configuration writer — persist one logical change as an override layer.

Each change kind owns one fixed file in the administrator drop-in
directory, so writing the same kind twice replaces the previous file
instead of accumulating. Writes are atomic (temp file in the same
directory, then rename); concurrent writers of the same kind race and
the last rename wins.
"""

from __future__ import annotations

import errno
import logging
import os
import tempfile
from enum import StrEnum
from pathlib import Path

from rebootmgr.core.codecs import encode_duration, encode_strategy
from rebootmgr.core.config.layers import render_layer
from rebootmgr.core.config.paths import (
    KEY_STRATEGY,
    KEY_WINDOW_DURATION,
    KEY_WINDOW_START,
    ConfigPaths,
)
from rebootmgr.core.errors import PersistError
from rebootmgr.core.models.enums import RebootStrategy
from rebootmgr.core.models.window import MaintenanceWindow

logger = logging.getLogger(__name__)

DEFAULT_DIR_MODE = 0o755
DEFAULT_FILE_MODE = 0o644

_HEADER = "Written by rebootmgr, overrides rebootmgr.conf"


class ChangeKind(StrEnum):
    """Which logical field a write changes."""

    STRATEGY = "strategy"
    MAINTENANCE_WINDOW = "maintenance-window"


DROPIN_NAMES: dict[ChangeKind, str] = {
    ChangeKind.STRATEGY: "50-strategy.conf",
    ChangeKind.MAINTENANCE_WINDOW: "50-maintenance-window.conf",
}


def mkdir_p(path: Path, mode: int = DEFAULT_DIR_MODE) -> None:
    """Create ``path`` and any missing parents, each with ``mode``.

    Raises:
        NotADirectoryError: If a segment exists but is not a directory.
        OSError: For any other failure.
    """
    current = Path(path.anchor) if path.is_absolute() else Path()
    parts = path.parts[1:] if path.is_absolute() else path.parts

    for part in parts:
        current = current / part
        try:
            current.mkdir(mode=mode)
            logger.debug("Created directory %s", current)
        except FileExistsError:
            if not current.is_dir():
                raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), str(current)) from None


class ConfigWriter:
    """Write strategy and maintenance window overrides.

    Args:
        paths: Configuration trees (default: from environment).
        dir_mode: Mode for directories created on demand.
    """

    def __init__(self, paths: ConfigPaths | None = None, dir_mode: int = DEFAULT_DIR_MODE) -> None:
        self.paths = paths or ConfigPaths.from_env()
        self.dir_mode = dir_mode

    @property
    def override_dir(self) -> Path:
        return self.paths.override_dir

    def path_for(self, kind: ChangeKind) -> Path:
        return self.override_dir / DROPIN_NAMES[kind]

    def write(self, kind: ChangeKind, payload: RebootStrategy | MaintenanceWindow | None) -> Path:
        """Persist one change and return the file written.

        ``payload`` is a RebootStrategy for STRATEGY, and a
        MaintenanceWindow (or None to clear the window) for
        MAINTENANCE_WINDOW.

        Raises:
            ValueError: If the payload does not fit the kind, or cannot be encoded.
            PersistError: If the directory or the file cannot be written.
        """
        if kind == ChangeKind.STRATEGY:
            if not isinstance(payload, RebootStrategy):
                raise ValueError(f"strategy change needs a RebootStrategy, got {payload!r}")
            values = {KEY_STRATEGY: encode_strategy(payload)}
        elif kind == ChangeKind.MAINTENANCE_WINDOW:
            if payload is not None and not isinstance(payload, MaintenanceWindow):
                raise ValueError(f"window change needs a MaintenanceWindow, got {payload!r}")
            values = self._window_values(payload)
        else:
            raise ValueError(f"unknown change kind {kind!r}")

        path = self.path_for(kind)
        self._ensure_dir()
        self._atomic_write(path, render_layer(values, header=_HEADER))
        logger.info("Wrote %s override to %s", kind, path)
        return path

    def write_strategy(self, strategy: RebootStrategy) -> Path:
        return self.write(ChangeKind.STRATEGY, strategy)

    def write_window(self, window: MaintenanceWindow | None) -> Path:
        return self.write(ChangeKind.MAINTENANCE_WINDOW, window)

    # ── Internals ───────────────────────────────────────────────

    @staticmethod
    def _window_values(window: MaintenanceWindow | None) -> dict[str, str]:
        # An empty start clears the window and hides any lower-layer duration
        if window is None:
            return {KEY_WINDOW_START: ""}
        return {
            KEY_WINDOW_START: window.start,
            KEY_WINDOW_DURATION: encode_duration(window.duration),
        }

    def _ensure_dir(self) -> None:
        try:
            mkdir_p(self.override_dir, self.dir_mode)
        except OSError as e:
            logger.error("Cannot create '%s' directory: %s", self.override_dir, e)
            raise PersistError(f"Cannot create '{self.override_dir}' directory: {e}") from e

    def _atomic_write(self, path: Path, content: str) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".rebootmgr_", suffix=".tmp")
            tmp = Path(tmp_name)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(content)
                tmp.chmod(DEFAULT_FILE_MODE)
                tmp.replace(path)
            except BaseException:
                tmp.unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Error writing '%s': %s", path, e)
            raise PersistError(f"Error writing '{path}': {e}") from e
