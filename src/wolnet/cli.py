"""Command-line interface for wolnet."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from wolnet import __version__
from wolnet.core.machine import Machine

DEFAULT_CONFIG = Path.home() / ".config" / "wolnet" / "config.yaml"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_cfg(config: str) -> tuple[dict, list[Machine]]:
    from wolnet.config.loader import load_config, machines_from_config, validate_config

    path = Path(config)
    if not path.exists():
        click.echo(f"Config file not found: {path}", err=True)
        sys.exit(1)
    raw = load_config(path)
    if not raw:
        click.echo("Config file is empty.", err=True)
        sys.exit(1)
    errors = validate_config(raw)
    if errors:
        click.echo("Config validation errors:", err=True)
        for e in errors:
            click.echo(f"  • {e}", err=True)
        sys.exit(1)
    return raw, machines_from_config(raw)


# ── Root group ────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="wolnet")
@click.option(
    "--config",
    "-c",
    default=str(DEFAULT_CONFIG),
    envvar="WOLNET_CONFIG",
    show_default=True,
    help="Path to wolnet config.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config: str, verbose: bool) -> None:
    """wolnet — wake machines on the network with Wake-on-LAN."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ── send command ──────────────────────────────────────────────────────────────


@main.command()
@click.option("--mac", "-m", help="MAC address of the device to wake up")
@click.option("--name", "-n", help="Name of a configured machine to wake up")
@click.option("--ip", help="Target IP address to send the packet to (required for WAN)")
@click.option("--port", default=9, show_default=True, help="Target UDP port for --ip")
@click.pass_context
def send(
    ctx: click.Context, mac: Optional[str], name: Optional[str], ip: Optional[str], port: int
) -> None:
    """Send a magic packet to a MAC address or a configured machine."""
    if (mac is None) == (name is None):
        click.echo("Either --mac or --name must be specified.", err=True)
        sys.exit(1)

    from wolnet.core.errors import WakeError
    from wolnet.core.mac import MacAddressError, parse_mac
    from wolnet.core.machine import find_machine
    from wolnet.core.magicpacket import MagicPacket

    if name is not None:
        _, machines = _load_cfg(ctx.obj["config"])
        match = find_machine(machines, name)
        if match is None:
            click.echo(f"Machine '{name}' not found in config.", err=True)
            sys.exit(1)
        mac = match.mac

    try:
        packet = MagicPacket(parse_mac(str(mac)))
    except MacAddressError as exc:
        click.echo(f"Invalid MAC address: {exc}", err=True)
        sys.exit(1)

    try:
        if ip:
            address = f"[{ip}]:{port}" if ":" in ip else f"{ip}:{port}"
            click.echo(f"Sending magic packet to {packet.mac} at {address}")
            packet.send(address)
        else:
            click.echo(f"Sending magic packet to {packet.mac}")
            targets = packet.broadcast()
            click.echo(f"  via {', '.join(targets)}")
    except (WakeError, OSError, ValueError) as exc:
        click.echo(f"✗  Failed to send magic packet: {exc}", err=True)
        sys.exit(2)

    click.echo("✓  Magic packet sent")


# ── list command ──────────────────────────────────────────────────────────────


@main.command("list")
@click.pass_context
def list_machines(ctx: click.Context) -> None:
    """List all configured machines."""
    _, machines = _load_cfg(ctx.obj["config"])
    if not machines:
        click.echo("No machines configured.")
        return
    click.echo(f"{'NAME':<24} {'MAC':<20} {'IP'}")
    click.echo("─" * 60)
    for m in machines:
        click.echo(f"{m.name:<24} {m.mac:<20} {m.ip or '-'}")


# ── status command ────────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Ping every configured machine once and show whether it is online."""
    raw, machines = _load_cfg(ctx.obj["config"])
    if not machines:
        click.echo("No machines configured.")
        return

    from wolnet.config.loader import settings_from_config
    from wolnet.core.status import poll_all

    settings = settings_from_config(raw)
    statuses = poll_all(machines, privileged=settings.privileged)
    click.echo(f"{'NAME':<24} {'IP':<20} {'STATUS'}")
    click.echo("─" * 60)
    for m in machines:
        click.echo(f"{m.name:<24} {m.ip or '-':<20} {statuses.get(m.name, 'unknown')}")


# ── serve command ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--listen", "-l", help="Bind address as host:port (overrides server.listen)")
@click.pass_context
def serve(ctx: click.Context, listen: Optional[str]) -> None:
    """Start the wolnet web UI and API server."""
    import uvicorn

    from wolnet.api.routes import create_app
    from wolnet.config.loader import ConfigError, parse_listen

    config_path = ctx.obj["config"]
    app = create_app(config_path=config_path)
    settings = app.state.settings
    host, port = settings.listen_host, settings.listen_port
    if listen:
        try:
            host, port = parse_listen(listen)
        except ConfigError as exc:
            click.echo(str(exc), err=True)
            sys.exit(1)

    click.echo(f"Starting wolnet web UI at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
