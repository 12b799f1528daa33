"""
Tests for the daemon — control service handlers and the RPC route.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from flask import Flask

from conftest import FIXED_NOW, write_file
from rebootmgr.core.config.layers import read_layer
from rebootmgr.core.config.paths import ConfigPaths
from rebootmgr.core.config.resolver import resolve_config
from rebootmgr.core.config.writer import ConfigWriter
from rebootmgr.core.errors import PersistError
from rebootmgr.core.models import (
    ControlState,
    MaintenanceWindow,
    RebootMethod,
    RebootStatus,
    RebootStrategy,
)
from rebootmgr.core.protocol import messages as m
from rebootmgr.daemon.scheduler import StateScheduler
from rebootmgr.daemon.server import create_app, split_address
from rebootmgr.daemon.service import ControlService, build_service


class TestRebootHandlers:
    def test_reboot_immediate(self, service: ControlService):
        reply = service.handle(m.REBOOT, {"Reboot": 0, "Force": False})

        assert not reply.failed
        assert reply.parameters == {"Method": 0, "Scheduled": FIXED_NOW.isoformat(timespec="seconds")}
        assert service.state.status is RebootStatus.REQUESTED

    def test_reboot_waits_for_window(self, service: ControlService):
        service.state.strategy = RebootStrategy.MAINT_WINDOW
        service.state.window = MaintenanceWindow(start="03:30")

        reply = service.handle(m.REBOOT, {"Reboot": 1})
        assert reply.parameters == {"Method": 1, "Scheduled": "03:30"}
        assert service.state.status is RebootStatus.WAITING_WINDOW

    def test_forced_reboot_skips_window(self, service: ControlService):
        service.state.strategy = RebootStrategy.MAINT_WINDOW
        service.state.window = MaintenanceWindow(start="03:30")

        service.handle(m.REBOOT, {"Reboot": 0, "Force": True})
        assert service.state.status is RebootStatus.REQUESTED

    def test_second_reboot_already_in_progress(self, service: ControlService):
        service.handle(m.REBOOT, {"Reboot": 1})
        reply = service.handle(m.REBOOT, {"Reboot": 0})

        assert reply.error == m.ERROR_ALREADY_IN_PROGRESS
        assert reply.parameters["Method"] == 1
        assert service.state.method is RebootMethod.SOFT

    def test_reboot_requires_method(self, service: ControlService):
        reply = service.handle(m.REBOOT, {"Force": True})
        assert reply.error == m.ERROR_INVALID_PARAMETER
        assert reply.parameters == {"parameter": "Reboot"}

    def test_reboot_unknown_method_rejected(self, service: ControlService):
        reply = service.handle(m.REBOOT, {"Reboot": -1})
        assert reply.error == m.ERROR_INVALID_PARAMETER
        assert not service.state.pending

    def test_cancel(self, service: ControlService):
        assert service.handle(m.CANCEL).parameters == {"Success": False}
        service.handle(m.REBOOT, {"Reboot": 0})
        assert service.handle(m.CANCEL).parameters == {"Success": True}
        assert not service.state.pending


class TestStatusHandlers:
    def test_status_idle(self, service: ControlService):
        assert service.handle(m.STATUS).parameters == {"RebootStatus": 0}

    def test_status_pending(self, service: ControlService):
        service.handle(m.REBOOT, {"Reboot": 1})
        params = service.handle(m.STATUS).parameters
        assert params["RebootStatus"] == 1
        assert params["RequestedMethod"] == 1
        assert "RebootTime" in params

    def test_full_status_without_window(self, service: ControlService):
        params = service.handle(m.FULL_STATUS).parameters
        assert params == {
            "RebootStatus": 0,
            "RebootStrategy": 0,
            "MaintenanceWindowStart": "",
            "MaintenanceWindowDuration": 0,
        }

    def test_full_status_with_window(self, service: ControlService):
        service.state.window = MaintenanceWindow(start="Sat 04:00", duration=timedelta(hours=2))
        params = service.handle(m.FULL_STATUS).parameters
        assert params["MaintenanceWindowStart"] == "Sat 04:00"
        assert params["MaintenanceWindowDuration"] == 7200

    def test_unknown_method(self, service: ControlService):
        reply = service.handle("org.openSUSE.rebootmgr.Explode")
        assert reply.error == m.ERROR_METHOD_NOT_FOUND


class TestSetHandlers:
    def test_set_strategy_persists_then_applies(self, service: ControlService, config_paths: ConfigPaths):
        reply = service.handle(m.SET_STRATEGY, {"Strategy": 3})

        assert not reply.failed
        assert service.state.strategy is RebootStrategy.OFF
        assert resolve_config(config_paths).strategy.value is RebootStrategy.OFF

    def test_set_strategy_unknown_rejected(self, service: ControlService):
        reply = service.handle(m.SET_STRATEGY, {"Strategy": -1})
        assert reply.error == m.ERROR_INVALID_PARAMETER

    def test_set_window(self, service: ControlService, config_paths: ConfigPaths):
        reply = service.handle(m.SET_WINDOW, {"Start": "03:30", "Duration": 5400})

        assert not reply.failed
        assert service.state.window == MaintenanceWindow(start="03:30", duration=timedelta(minutes=90))
        assert resolve_config(config_paths).window == service.state.window

    def test_clear_window(self, service: ControlService, config_paths: ConfigPaths):
        service.state.window = MaintenanceWindow(start="03:30")
        service.handle(m.SET_WINDOW, {"Start": "", "Duration": 0})

        assert service.state.window is None
        layer = read_layer(config_paths.override_dir / "50-maintenance-window.conf")
        assert layer is not None
        assert layer.values == {"window-start": ""}

    def test_set_window_duration_without_start(self, service: ControlService):
        reply = service.handle(m.SET_WINDOW, {"Start": "", "Duration": 3600})
        assert reply.parameters == {"parameter": "Duration"}

    def test_set_window_bad_start(self, service: ControlService, config_paths: ConfigPaths):
        reply = service.handle(m.SET_WINDOW, {"Start": "teatime", "Duration": 3600})
        assert reply.parameters == {"parameter": "Start"}
        assert not config_paths.admin_dir.exists()

    @pytest.mark.parametrize("duration", [90, 30, 5415])
    def test_set_window_rejects_partial_minutes(
        self, service: ControlService, config_paths: ConfigPaths, duration: int
    ):
        reply = service.handle(m.SET_WINDOW, {"Start": "03:30", "Duration": duration})

        assert reply.error == m.ERROR_INVALID_PARAMETER
        assert reply.parameters == {"parameter": "Duration"}
        assert service.state.window is None
        assert not config_paths.admin_dir.exists()

    def test_set_window_huge_duration(self, app: Flask):
        resp = app.test_client().post(
            "/rpc",
            json={"method": m.SET_WINDOW, "parameters": {"Start": "03:30", "Duration": 60 * 10**13}},
        )
        assert resp.status_code == 200
        assert resp.get_json() == {
            "error": m.ERROR_INVALID_PARAMETER,
            "parameters": {"parameter": "Duration"},
        }

    def test_persist_failure_leaves_state(self, service: ControlService):
        class BrokenWriter:
            def write_strategy(self, strategy):
                raise PersistError("Error writing '50-strategy.conf': disk full")

        service.writer = BrokenWriter()  # type: ignore[assignment]
        reply = service.handle(m.SET_STRATEGY, {"Strategy": 1})

        assert reply.error == m.ERROR_PERSIST_FAILED
        assert "disk full" in reply.parameters["reason"]
        assert service.state.strategy is RebootStrategy.BEST_EFFORT


class TestBuildService:
    def test_seeded_from_configuration(self, config_paths: ConfigPaths):
        write_file(
            config_paths.vendor_dir / "rebootmgr.conf",
            "[rebootmgr]\nstrategy=instantly\nwindow-start=03:30\n",
        )
        service = build_service(config_paths, scheduler=StateScheduler())
        assert service.state.strategy is RebootStrategy.INSTANTLY
        assert service.state.window is not None
        assert service.writer.override_dir == config_paths.override_dir


class TestRpcRoute:
    def test_call(self, app: Flask):
        resp = app.test_client().post("/rpc", json={"method": m.STATUS, "parameters": {}})
        assert resp.status_code == 200
        assert resp.get_json() == {"parameters": {"RebootStatus": 0}}

    def test_error_reply_is_200(self, app: Flask):
        resp = app.test_client().post("/rpc", json={"method": "nope"})
        assert resp.status_code == 200
        assert resp.get_json()["error"] == m.ERROR_METHOD_NOT_FOUND

    def test_not_an_envelope(self, app: Flask):
        resp = app.test_client().post("/rpc", data="garbage", content_type="application/json")
        assert resp.status_code == 400

    def test_parameters_must_be_object(self, app: Flask):
        resp = app.test_client().post("/rpc", json={"method": m.STATUS, "parameters": [1]})
        assert resp.status_code == 400

    def test_get_not_allowed(self, app: Flask):
        assert app.test_client().get("/rpc").status_code == 405

    def test_apps_do_not_share_state(self, config_paths: ConfigPaths):
        first = create_app(ControlService(ControlState(), ConfigWriter(config_paths)))
        second = create_app(ControlService(ControlState(), ConfigWriter(config_paths)))
        first.test_client().post("/rpc", json={"method": m.REBOOT, "parameters": {"Reboot": 0}})

        resp = second.test_client().post("/rpc", json={"method": m.STATUS, "parameters": {}})
        assert resp.get_json()["parameters"]["RebootStatus"] == 0


class TestSplitAddress:
    def test_ok(self):
        assert split_address("127.0.0.1:7364") == ("127.0.0.1", 7364)

    def test_bad(self):
        for bad in ("localhost", ":80", "host:port"):
            with pytest.raises(ValueError):
                split_address(bad)
