"""
rebootmgrd — the coordinating daemon's entry point.

Resolves configuration, builds the ControlState and serves the RPC
endpoint. ``--check-config`` resolves and reports the effective
configuration without serving, for use after editing drop-ins.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from rebootmgr import __version__
from rebootmgr.core.codecs import encode_duration, encode_strategy
from rebootmgr.core.config.paths import ConfigPaths
from rebootmgr.core.config.resolver import resolve_config
from rebootmgr.core.errors import SourceMalformedError
from rebootmgr.core.observability.logging_config import level_from_flags, setup_logging
from rebootmgr.core.protocol.transport import default_address


@click.command()
@click.version_option(version=__version__, prog_name="rebootmgrd")
@click.option("--address", "-a", default=None, help="Listen on host:port (default: $REBOOTMGR_ADDRESS).")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Administrator configuration tree (default: /etc/rebootmgr).",
)
@click.option(
    "--vendor-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Package defaults tree (default: /usr/share/rebootmgr).",
)
@click.option("--check-config", is_flag=True, help="Resolve configuration, report it and exit.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
def rebootmgrd(
    address: str | None,
    config_dir: str | None,
    vendor_dir: str | None,
    check_config: bool,
    debug: bool,
) -> None:
    """rebootmgrd — coordinate host reboots."""
    setup_logging(level_from_flags(debug=debug, default="INFO"))

    env_paths = ConfigPaths.from_env()
    paths = ConfigPaths(
        vendor_dir=Path(vendor_dir) if vendor_dir else env_paths.vendor_dir,
        admin_dir=Path(config_dir) if config_dir else env_paths.admin_dir,
    )

    if check_config:
        _check_config(paths)
        return

    from rebootmgr.daemon.server import create_app, run_server
    from rebootmgr.daemon.service import build_service

    try:
        service = build_service(paths)
    except SourceMalformedError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    app = create_app(service)
    try:
        run_server(app, address or default_address())
    except ValueError as e:
        click.secho(f"❌ Invalid address: {e}", fg="red", err=True)
        sys.exit(1)


def _check_config(paths: ConfigPaths) -> None:
    try:
        resolved = resolve_config(paths)
    except SourceMalformedError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(f"Strategy: {encode_strategy(resolved.strategy.value)}")
    if resolved.window:
        click.echo(f"Maintenance window: {resolved.window.start}, "
                   f"duration {encode_duration(resolved.window.duration)}")
    else:
        click.echo("Maintenance window: none")

    for key, source in resolved.sources.items():
        click.echo(f"   {key} from {source}")

    if resolved.problems:
        for problem in resolved.problems:
            click.secho(f"⚠️  {problem}", fg="yellow", err=True)
        sys.exit(1)
    click.secho("✅ Configuration OK", fg="green")


if __name__ == "__main__":
    rebootmgrd()
