"""
Transport — carry one call to the daemon and bring back its reply.

The daemon listens on a loopback HTTP endpoint; each call is a single
``POST /rpc`` on a fresh connection::

    -> {"method": "org.openSUSE.rebootmgr.Status", "parameters": {}}
    <- {"parameters": {"RebootStatus": 0}}
    <- {"error": "org.openSUSE.rebootmgr.AlreadyInProgress", "parameters": {...}}

Anything that prevents a well-formed reply from arriving raises
CallError. Daemon-reported errors are *not* raised here: they come back
as a Reply with ``error`` set and the client decides what they mean.
"""

from __future__ import annotations

import json
import logging
import os
import urllib.error
import urllib.request
from typing import Any, Protocol

from pydantic import ValidationError

from rebootmgr.core.errors import CallError
from rebootmgr.core.protocol.messages import Reply

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "127.0.0.1:7364"
DEFAULT_TIMEOUT = 10.0
RPC_PATH = "/rpc"


def default_address() -> str:
    """Daemon address from REBOOTMGR_ADDRESS, or the built-in default."""
    return os.environ.get("REBOOTMGR_ADDRESS") or DEFAULT_ADDRESS


class Transport(Protocol):
    """Anything that can perform one synchronous call."""

    def call(self, method: str, parameters: dict[str, Any]) -> Reply: ...


class HttpTransport:
    """Calls the daemon's RPC endpoint over loopback HTTP.

    Args:
        address: ``host:port`` of the daemon.
        timeout: Seconds to wait for the whole call.
    """

    def __init__(self, address: str | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.address = address or default_address()
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"http://{self.address}{RPC_PATH}"

    def call(self, method: str, parameters: dict[str, Any]) -> Reply:
        body = json.dumps({"method": method, "parameters": parameters}).encode()
        req = urllib.request.Request(
            self.url,
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        logger.debug("Calling %s at %s", method, self.url)

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            raise CallError(f"Failed to call {method}: HTTP {e.code} {e.reason}") from e
        except (urllib.error.URLError, OSError) as e:
            reason = getattr(e, "reason", e)
            raise CallError(f"Failed to connect to {self.address}: {reason}") from e

        return decode_reply(method, raw)


def decode_reply(method: str, raw: bytes | str) -> Reply:
    """Parse a reply envelope.

    Raises:
        CallError: If the envelope is not a JSON object of the expected shape.
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise CallError(f"Failed to parse {method} reply: {e}") from e
    if not isinstance(data, dict):
        raise CallError(f"Failed to parse {method} reply: expected an object")

    try:
        return Reply.model_validate(data)
    except ValidationError as e:
        raise CallError(f"Failed to parse {method} reply: {e}") from e
