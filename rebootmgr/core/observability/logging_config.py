"""
Logging configuration — central setup for both entry points.

Called once at startup by ``rebootmgrctl`` and ``rebootmgrd``. Every
module that does ``logger = logging.getLogger(__name__)`` inherits
this config.

Levels are resolved in precedence order:
    CLI flag  >  REBOOTMGR_LOG_LEVEL env var  >  entry point default

The log file and its level come from REBOOTMGR_LOG_FILE and
REBOOTMGR_LOG_FILE_LEVEL unless given explicitly.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

# ── Format strings ──────────────────────────────────────────────

_FMT_MINIMAL = "%(message)s"

_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# File output at full detail
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# Flask's request log and urllib noise
_NOISY_LOGGERS = ("werkzeug", "urllib3")


def level_from_flags(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    default: str = "WARNING",
) -> str:
    """Pick a level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get("REBOOTMGR_LOG_LEVEL", default)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Log file path; defaults to REBOOTMGR_LOG_FILE.
        log_file_level: Level for the log file; defaults to
            REBOOTMGR_LOG_FILE_LEVEL, then to ``level``.
        environ: Environment to read (default: ``os.environ``).
    """
    env = os.environ if environ is None else environ
    log_file = log_file or env.get("REBOOTMGR_LOG_FILE")
    log_file_level = log_file_level or env.get("REBOOTMGR_LOG_FILE_LEVEL")

    console_level = _parse_level(level)
    handlers: list[logging.Handler] = [_console_handler(console_level)]
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    # Root passes everything the most verbose handler wants
    logging.basicConfig(
        level=min(h.level for h in handlers),
        handlers=handlers,
        force=True,
    )

    # Werkzeug logs every request at INFO
    if console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    if level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
    return handler


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
