"""
End-to-end tests — CLI and client against an in-process daemon.

Calls travel client → AppTransport → Flask test client → ControlService,
with configuration read from and written to a temp tree.
"""

from datetime import timedelta

from click.testing import CliRunner

from conftest import AppTransport, write_file
from rebootmgr.core.config.paths import ConfigPaths
from rebootmgr.core.config.resolver import resolve_config
from rebootmgr.core.models import RebootStrategy
from rebootmgr.core.protocol.client import RebootMgrClient
from rebootmgr.daemon.server import create_app
from rebootmgr.daemon.service import build_service
from rebootmgr.main import cli


def run(args: list[str], transport: AppTransport):
    return CliRunner().invoke(cli, args, obj={"transport": transport})


class TestStartup:
    def test_no_configuration(self, config_paths: ConfigPaths):
        service = build_service(config_paths)
        transport = AppTransport(create_app(service).test_client())

        full = RebootMgrClient(transport).full_status()
        assert full.strategy is RebootStrategy.BEST_EFFORT
        assert full.window_start == ""

    def test_vendor_defaults_served(self, config_paths: ConfigPaths):
        write_file(
            config_paths.vendor_dir / "rebootmgr.conf",
            "[rebootmgr]\nstrategy=maint-window\nwindow-start=03:30\nwindow-duration=1h\n",
        )
        transport = AppTransport(create_app(build_service(config_paths)).test_client())

        result = run(["status", "--full"], transport)
        assert result.exit_code == 0
        assert "Strategy: maint-window" in result.output
        assert "Duration of maintenance window: 01h00m" in result.output


class TestRebootFlow:
    def test_reboot_then_duplicate_then_cancel(self, app_transport: AppTransport):
        first = run(["reboot"], app_transport)
        assert first.exit_code == 0
        assert "The reboot got scheduled for 2026-10-17T03:30:00+00:00" in first.output

        second = run(["soft-reboot"], app_transport)
        assert second.exit_code == 0
        assert "A reboot is already scheduled for" in second.output

        status = run(["status", "--quiet"], app_transport)
        assert status.exit_code == 1

        assert "was successful" in run(["cancel"], app_transport).output
        assert run(["status", "--quiet"], app_transport).exit_code == 0

    def test_soft_reboot_waits_for_window(self, app_transport: AppTransport):
        run(["set-strategy", "maint-window"], app_transport)
        run(["set-window", "Sat 04:00", "2h"], app_transport)

        result = run(["soft-reboot"], app_transport)
        assert "The soft-reboot got scheduled for Sat 04:00" in result.output

        status = run(["status"], app_transport)
        assert "Soft-reboot requested, waiting for maintenance window" in status.output
        assert run(["status", "-q"], app_transport).exit_code == 2


class TestPersistedSettings:
    def test_set_strategy_survives_restart(self, app_transport: AppTransport, config_paths: ConfigPaths):
        assert run(["set-strategy", "off"], app_transport).exit_code == 0
        assert run(["set-strategy", "instantly"], app_transport).exit_code == 0

        restarted = AppTransport(create_app(build_service(config_paths)).test_client())
        result = run(["get-strategy"], restarted)
        assert "Reboot strategy: instantly" in result.output
        assert [p.name for p in config_paths.override_dir.iterdir()] == ["50-strategy.conf"]

    def test_set_window_roundtrip(self, app_transport: AppTransport, config_paths: ConfigPaths):
        assert run(["set-window", "Mon..Fri 22:00", "90m"], app_transport).exit_code == 0

        window = resolve_config(config_paths).window
        assert window is not None
        assert window.start == "Mon..Fri 22:00"
        assert window.duration == timedelta(minutes=90)

        result = run(["get-window"], app_transport)
        assert "Start of maintenance window: Mon..Fri 22:00" in result.output
        assert "Duration of maintenance window: 01h30m" in result.output

    def test_window_with_seconds_refused(self, app_transport: AppTransport, config_paths: ConfigPaths):
        result = run(["set-window", "03:30", "90s"], app_transport)

        assert result.exit_code == 1
        assert "whole minutes" in result.output
        assert app_transport.calls == []
        assert not config_paths.admin_dir.exists()

    def test_window_survives_restart_exactly(self, app_transport: AppTransport, config_paths: ConfigPaths):
        assert run(["set-window", "Sat 04:00", "5400"], app_transport).exit_code == 0

        restarted = build_service(config_paths)
        assert restarted.state.window is not None
        assert restarted.state.window.duration == timedelta(seconds=5400)

    def test_invalid_window_never_reaches_daemon(self, app_transport: AppTransport, config_paths: ConfigPaths):
        result = run(["set-window", "", "1h"], app_transport)

        assert result.exit_code == 1
        assert app_transport.calls == []
        assert not config_paths.admin_dir.exists()

    def test_clear_window(self, app_transport: AppTransport, config_paths: ConfigPaths):
        run(["set-window", "03:30", "1h"], app_transport)
        assert run(["set-window", "", ""], app_transport).exit_code == 0

        assert "No maintenance window configured" in run(["get-window"], app_transport).output
        assert resolve_config(config_paths).window is None
