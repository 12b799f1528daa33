"""
Daemon server — Flask app factory for the RPC endpoint.

The app holds a reference to the ControlService it serves; there is no
module-level state, so tests can build as many apps as they like.
"""

from __future__ import annotations

import logging

from flask import Flask

from rebootmgr.daemon.routes_rpc import SERVICE_KEY, rpc_bp
from rebootmgr.daemon.service import ControlService

logger = logging.getLogger(__name__)


def create_app(service: ControlService) -> Flask:
    """Create the daemon's Flask application around ``service``."""
    app = Flask(__name__)
    app.extensions[SERVICE_KEY] = service
    app.register_blueprint(rpc_bp)

    logger.info("rebootmgrd app created (strategy=%s)", service.state.strategy.name.lower())
    return app


def split_address(address: str) -> tuple[str, int]:
    """Split ``host:port``.

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not host or not (port.isascii() and port.isdigit()):
        raise ValueError(f"expected host:port, got {address!r}")
    return host, int(port)


def run_server(app: Flask, address: str) -> None:
    """Serve ``app`` on ``address`` until interrupted."""
    host, port = split_address(address)
    logger.info("rebootmgrd listening on %s:%d", host, port)
    app.run(host=host, port=port, debug=False, use_reloader=False, threaded=True)
