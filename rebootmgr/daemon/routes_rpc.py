"""
RPC route — the daemon's single protocol endpoint.

POST /rpc with ``{"method": ..., "parameters": {...}}``. Replies are
always HTTP 200 with a reply envelope; only a body that is not an
envelope at all gets a 400.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from rebootmgr.core.protocol import messages as m
from rebootmgr.daemon.service import ControlService

logger = logging.getLogger(__name__)

rpc_bp = Blueprint("rpc", __name__)

SERVICE_KEY = "rebootmgr.service"


def _service() -> ControlService:
    return current_app.extensions[SERVICE_KEY]


@rpc_bp.route("/rpc", methods=["POST"])
def rpc_call():  # type: ignore[no-untyped-def]
    """Dispatch one protocol call."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict) or not isinstance(body.get("method"), str):
        return jsonify({"error": m.ERROR_INVALID_PARAMETER, "parameters": {"parameter": "method"}}), 400

    parameters = body.get("parameters") or {}
    if not isinstance(parameters, dict):
        return jsonify({"error": m.ERROR_INVALID_PARAMETER, "parameters": {"parameter": "parameters"}}), 400

    reply = _service().handle(body["method"], parameters)
    return jsonify(reply.to_wire())
