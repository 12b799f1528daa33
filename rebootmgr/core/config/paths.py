"""
Configuration locations — where layers are read from and written to.

Resolved once per process. Environment variables let tests, containers
and packagers relocate the trees:

    REBOOTMGR_VENDOR_DIR  package defaults   (default: /usr/share/rebootmgr)
    REBOOTMGR_CONFIG_DIR  administrator tree (default: /etc/rebootmgr)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

GROUP = "rebootmgr"

KEY_STRATEGY = "strategy"
KEY_WINDOW_START = "window-start"
KEY_WINDOW_DURATION = "window-duration"
KNOWN_KEYS = (KEY_WINDOW_START, KEY_WINDOW_DURATION, KEY_STRATEGY)

MAIN_FILE = "rebootmgr.conf"
DROPIN_DIR = "rebootmgr.conf.d"
DROPIN_SUFFIX = ".conf"

DEFAULT_VENDOR_DIR = Path("/usr/share/rebootmgr")
DEFAULT_ADMIN_DIR = Path("/etc/rebootmgr")


@dataclass(frozen=True)
class ConfigPaths:
    """Vendor and administrator configuration trees."""

    vendor_dir: Path = DEFAULT_VENDOR_DIR
    admin_dir: Path = DEFAULT_ADMIN_DIR

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ConfigPaths:
        env = os.environ if environ is None else environ
        return cls(
            vendor_dir=Path(env.get("REBOOTMGR_VENDOR_DIR") or DEFAULT_VENDOR_DIR),
            admin_dir=Path(env.get("REBOOTMGR_CONFIG_DIR") or DEFAULT_ADMIN_DIR),
        )

    @property
    def main_files(self) -> list[Path]:
        """Main files, lowest priority first."""
        return [self.vendor_dir / MAIN_FILE, self.admin_dir / MAIN_FILE]

    @property
    def dropin_dirs(self) -> list[Path]:
        """Drop-in directories, lowest priority first."""
        return [self.vendor_dir / DROPIN_DIR, self.admin_dir / DROPIN_DIR]

    @property
    def override_dir(self) -> Path:
        """Where administrator overrides are written."""
        return self.admin_dir / DROPIN_DIR
