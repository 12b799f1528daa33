"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from flask import Flask
from flask.testing import FlaskClient

from rebootmgr.core.config.paths import ConfigPaths
from rebootmgr.core.config.writer import ConfigWriter
from rebootmgr.core.models.state import ControlState
from rebootmgr.core.protocol.messages import Reply
from rebootmgr.core.protocol.transport import decode_reply
from rebootmgr.daemon.scheduler import StateScheduler
from rebootmgr.daemon.server import create_app
from rebootmgr.daemon.service import ControlService

FIXED_NOW = datetime(2026, 10, 17, 3, 30, tzinfo=UTC)


class FakeTransport:
    """Returns canned replies and records every call made."""

    def __init__(self, *replies: Reply) -> None:
        self.replies = list(replies)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def call(self, method: str, parameters: dict[str, Any]) -> Reply:
        self.calls.append((method, parameters))
        if not self.replies:
            raise AssertionError(f"unexpected call to {method}")
        return self.replies.pop(0)


class AppTransport:
    """Routes client calls into a Flask test client."""

    def __init__(self, client: FlaskClient) -> None:
        self.client = client
        self.calls: list[str] = []

    def call(self, method: str, parameters: dict[str, Any]) -> Reply:
        self.calls.append(method)
        resp = self.client.post("/rpc", json={"method": method, "parameters": parameters})
        assert resp.status_code == 200
        return decode_reply(method, resp.data)


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def config_paths(tmp_path: Path) -> ConfigPaths:
    """Vendor and admin trees under a temp dir (neither created yet)."""
    return ConfigPaths(
        vendor_dir=tmp_path / "usr" / "share" / "rebootmgr",
        admin_dir=tmp_path / "etc" / "rebootmgr",
    )


@pytest.fixture
def service(config_paths: ConfigPaths) -> ControlService:
    """A control service over a default state, persisting under tmp_path."""
    return ControlService(
        ControlState(),
        ConfigWriter(config_paths),
        StateScheduler(clock=lambda: FIXED_NOW),
    )


@pytest.fixture
def app(service: ControlService) -> Flask:
    app = create_app(service)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def app_transport(app: Flask) -> AppTransport:
    return AppTransport(app.test_client())
