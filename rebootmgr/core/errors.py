"""
Error kinds raised across the control plane.

Every failure that crosses a component boundary is one of these types,
so the CLI façade can render a message and an exit code without
inspecting tracebacks. A configuration source that is simply absent is
not an error and has no type here. An undecodable value is not an
exception either: the codecs return ``Decoded`` with an INVALID outcome.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class RebootMgrError(Exception):
    """Base class for all control plane errors."""


# ── Configuration ───────────────────────────────────────────────────


class ConfigError(RebootMgrError):
    """Raised when configuration cannot be resolved or persisted."""


class SourceMalformedError(ConfigError):
    """A configuration layer exists but cannot be read or parsed."""

    def __init__(self, path: Path, reason: str, line: int | None = None) -> None:
        self.path = path
        self.reason = reason
        self.line = line
        where = f"{path}:{line}" if line is not None else str(path)
        super().__init__(f"Malformed configuration {where}: {reason}")


class PersistError(ConfigError):
    """Creating the override directory or writing an override file failed."""


# ── Protocol ────────────────────────────────────────────────────────


class CallError(RebootMgrError):
    """The call could not be completed (connection, timeout, bad envelope).

    No state mutation may be assumed when this is raised.
    """


class ProtocolError(RebootMgrError):
    """The daemon answered with a non-empty error identifier."""

    def __init__(self, error_id: str, parameters: dict[str, Any] | None = None) -> None:
        self.error_id = error_id
        self.parameters = parameters or {}
        super().__init__(f"Calling rebootmgrd failed: {error_id}")


class ProtocolDecodeError(RebootMgrError):
    """A reply is missing a mandatory field or carries a malformed one."""

    def __init__(self, method: str, detail: str) -> None:
        self.method = method
        self.detail = detail
        super().__init__(f"Failed to parse {method} reply: {detail}")


class RequestValidationError(RebootMgrError, ValueError):
    """A request was rejected locally before any call was attempted."""
