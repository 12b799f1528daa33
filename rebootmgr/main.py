"""
rebootmgrctl — administrative client for rebootmgrd.

Usage:
    rebootmgrctl reboot [now]
    rebootmgrctl soft-reboot [now]
    rebootmgrctl cancel
    rebootmgrctl status [--quiet|--full]
    rebootmgrctl is-active [--quiet]
    rebootmgrctl set-strategy best-effort|maint-window|instantly|off
    rebootmgrctl get-strategy
    rebootmgrctl set-window <time> <duration>
    rebootmgrctl get-window

Every command is one protocol call. Exit codes: 0 on success, 1 on a
usage error or a failed call; ``status --quiet`` exits with the
numeric reboot status.
"""

from __future__ import annotations

import sys
from datetime import timedelta
from typing import NoReturn

import click

from rebootmgr import __version__
from rebootmgr.core.codecs import (
    describe_method,
    describe_status,
    encode_duration,
    encode_strategy,
    strategy_names,
)
from rebootmgr.core.errors import RebootMgrError, RequestValidationError
from rebootmgr.core.models.enums import RebootMethod, RebootStrategy
from rebootmgr.core.observability.logging_config import level_from_flags, setup_logging
from rebootmgr.core.protocol.client import RebootMgrClient
from rebootmgr.core.protocol.transport import HttpTransport


class CtlGroup(click.Group):
    """Command group whose usage errors exit with 1 instead of 2."""

    def make_context(self, info_name, args, parent=None, **extra):  # type: ignore[no-untyped-def]
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def invoke(self, ctx: click.Context):  # type: ignore[no-untyped-def]
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@click.group(cls=CtlGroup)
@click.version_option(version=__version__, prog_name="rebootmgrctl")
@click.option("--address", "-a", default=None, help="Daemon address host:port (default: $REBOOTMGR_ADDRESS).")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, address: str | None, verbose: bool, quiet: bool, debug: bool) -> None:
    """rebootmgrctl — control the reboot manager daemon."""
    ctx.ensure_object(dict)
    ctx.obj["address"] = address
    ctx.obj.setdefault("transport", None)

    setup_logging(level_from_flags(debug=debug, verbose=verbose, quiet=quiet))


def _client(ctx: click.Context) -> RebootMgrClient:
    obj = ctx.find_root().obj
    return RebootMgrClient(obj.get("transport") or HttpTransport(obj.get("address")))


def _fail(error: Exception) -> NoReturn:
    click.secho(f"❌ {error}", fg="red", err=True)
    sys.exit(1)


def _check_now(when: str | None) -> bool:
    if when is None:
        return False
    if when.lower() != "now":
        raise click.UsageError(f"Unexpected argument '{when}', only 'now' is allowed.")
    return True


# ── Reboot requests ──────────────────────────────────────────────────


def _trigger(ctx: click.Context, method: RebootMethod, force: bool) -> None:
    try:
        outcome = _client(ctx).reboot(method, force)
    except RebootMgrError as e:
        _fail(e)

    what = describe_method(outcome.method if outcome.method is not None else method)
    if outcome.already_scheduled:
        click.echo(f"A {what} is already scheduled for {outcome.scheduled}, ignoring new request")
    else:
        click.echo(f"The {what} got scheduled for {outcome.scheduled}")


@cli.command()
@click.argument("when", required=False)
@click.pass_context
def reboot(ctx: click.Context, when: str | None) -> None:
    """Request a reboot; 'now' ignores strategy and window."""
    _trigger(ctx, RebootMethod.HARD, _check_now(when))


@cli.command("soft-reboot")
@click.argument("when", required=False)
@click.pass_context
def soft_reboot(ctx: click.Context, when: str | None) -> None:
    """Request a soft reboot (userspace only)."""
    _trigger(ctx, RebootMethod.SOFT, _check_now(when))


@cli.command()
@click.pass_context
def cancel(ctx: click.Context) -> None:
    """Cancel a pending reboot."""
    try:
        success = _client(ctx).cancel()
    except RebootMgrError as e:
        _fail(e)

    if success:
        click.echo("Request to cancel reboot was successful")
    else:
        click.echo("Request to cancel reboot failed")


# ── Status ───────────────────────────────────────────────────────────


@cli.command()
@click.option("--quiet", "-q", is_flag=True, help="No output; exit code is the status value.")
@click.option("--full", is_flag=True, help="Include strategy and maintenance window.")
@click.pass_context
def status(ctx: click.Context, quiet: bool, full: bool) -> None:
    """Show whether a reboot is pending."""
    if quiet and full:
        raise click.UsageError("--quiet and --full are mutually exclusive.")

    client = _client(ctx)
    if full:
        try:
            result = client.full_status()
        except RebootMgrError as e:
            _fail(e)

        click.echo(f"Status: {describe_status(result.status, result.method)}")
        if result.reboot_time:
            click.echo(f"Reboot at: {result.reboot_time}")
        click.echo(f"Strategy: {_strategy_text(result.strategy)}")
        if result.window_start:
            click.echo(f"Start of maintenance window: {result.window_start}")
            click.echo(f"Duration of maintenance window: {_duration_text(result.window_duration)}")
        return

    try:
        result = client.status()
    except RebootMgrError as e:
        if quiet:
            sys.exit(1)
        _fail(e)

    if quiet:
        sys.exit(int(result.status))
    click.echo(f"Status: {describe_status(result.status, result.method)}")


@cli.command("is-active")
@click.option("--quiet", "-q", is_flag=True, help="No output, only the exit code.")
@click.pass_context
def is_active(ctx: click.Context, quiet: bool) -> None:
    """Check whether rebootmgrd answers."""
    try:
        _client(ctx).status()
    except RebootMgrError:
        if not quiet:
            click.echo("RebootMgr is not running")
        sys.exit(1)

    if not quiet:
        click.echo("RebootMgr is active")


# ── Strategy ─────────────────────────────────────────────────────────


@cli.command("set-strategy")
@click.argument("name")
@click.pass_context
def set_strategy(ctx: click.Context, name: str) -> None:
    """Set the reboot strategy."""
    try:
        strategy = _client(ctx).set_strategy(name)
    except RequestValidationError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        click.echo(f"   Valid strategies: {', '.join(strategy_names())}", err=True)
        sys.exit(1)
    except RebootMgrError as e:
        _fail(e)

    click.echo(f"Reboot strategy set to {encode_strategy(strategy)}")


@cli.command("get-strategy")
@click.pass_context
def get_strategy(ctx: click.Context) -> None:
    """Show the reboot strategy."""
    try:
        result = _client(ctx).full_status()
    except RebootMgrError as e:
        _fail(e)

    if result.strategy == RebootStrategy.UNKNOWN:
        click.secho(f"❌ Internal error, returned strategy is: {int(result.strategy)}", fg="red", err=True)
        sys.exit(1)
    click.echo(f"Reboot strategy: {encode_strategy(result.strategy)}")


# ── Maintenance window ───────────────────────────────────────────────


@cli.command("set-window")
@click.argument("start")
@click.argument("duration")
@click.pass_context
def set_window(ctx: click.Context, start: str, duration: str) -> None:
    """Set the maintenance window; empty START and DURATION clear it."""
    try:
        window = _client(ctx).set_window(start, duration)
    except RebootMgrError as e:
        _fail(e)

    if window is None:
        click.echo("Maintenance window cleared")
    else:
        click.echo(
            f"Maintenance window set to {window.start}, duration {encode_duration(window.duration)}"
        )


@cli.command("get-window")
@click.pass_context
def get_window(ctx: click.Context) -> None:
    """Show the maintenance window."""
    try:
        result = _client(ctx).full_status()
    except RebootMgrError as e:
        _fail(e)

    if not result.window_start:
        click.echo("No maintenance window configured")
        return
    click.echo(f"Start of maintenance window: {result.window_start}")
    click.echo(f"Duration of maintenance window: {_duration_text(result.window_duration)}")


def _strategy_text(strategy: RebootStrategy) -> str:
    try:
        return encode_strategy(strategy)
    except ValueError:
        return "unknown"


def _duration_text(seconds: int) -> str:
    return encode_duration(timedelta(seconds=seconds))


if __name__ == "__main__":
    cli()
