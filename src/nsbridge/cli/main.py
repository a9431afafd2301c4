"""CLI entry point for nsbridge diagnostics.

Invoked as::

    nsbridge [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m nsbridge.cli.main

Commands
--------
version     Show version information
runtimes    List registered native runtimes and their availability
check       Initialise the bridge and report readiness
date        Round-trip a timestamp through calendar fields
"""
from __future__ import annotations

import logging
import sys
from dataclasses import replace

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

import nsbridge

console = Console()
err_console = Console(stderr=True)


def _init_or_exit(config_path: str | None, runtime_name: str | None) -> nsbridge.Bridge:
    """Initialise the bridge, printing the failure and exiting on error."""
    try:
        config = nsbridge.load_config(config_path)
        if runtime_name:
            config = replace(config, runtime=runtime_name)
        return nsbridge.init_bridge(config)
    except nsbridge.BridgeError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="nsbridge")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Marshalling primitives between Python and a native object runtime."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    table = Table(show_header=False, box=None)
    table.add_row("[bold]nsbridge[/bold]", f"v{nsbridge.__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# runtimes command
# ---------------------------------------------------------------------------


@cli.command(name="runtimes")
def runtimes_command() -> None:
    """List registered native runtimes, including entry-point backends."""
    nsbridge.runtimes.load_entrypoints()
    available = set(nsbridge.runtimes.available())

    table = Table(title="Native runtimes")
    table.add_column("Name", style="bold")
    table.add_column("Class")
    table.add_column("Available")
    for name in nsbridge.runtimes.list_runtimes():
        cls = nsbridge.runtimes.get(name)
        status = "[green]yes[/green]" if name in available else "[dim]no[/dim]"
        table.add_row(name, f"{cls.__module__}.{cls.__qualname__}", status)
    console.print(table)


# ---------------------------------------------------------------------------
# check command
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.option("--config", "config_path", default=None, help="YAML configuration file")
@click.option("--runtime", "runtime_name", default=None, help="Override the configured runtime")
def check_command(config_path: str | None, runtime_name: str | None) -> None:
    """Initialise the bridge and exercise a string round-trip."""
    bridge = _init_or_exit(config_path, runtime_name)
    with nsbridge.HandleScope(bridge.runtime) as scope:
        sample = scope.own(bridge.scalars.text_to_native("nsbridge ✓"))
        echoed = bridge.scalars.native_to_text(sample)

    if echoed != "nsbridge ✓":
        err_console.print(f"[red]FAILED[/red] string round-trip returned {echoed!r}")
        sys.exit(1)

    table = Table(show_header=False, box=None)
    table.add_row("[bold]Bridge ready[/bold]", "[green]yes[/green]" if nsbridge.bridge_ready() else "[red]no[/red]")
    table.add_row("Runtime", bridge.runtime_name)
    table.add_row("Calendar", bridge.config.calendar)
    table.add_row("Time zone", bridge.config.timezone or "(host)")
    console.print(table)


# ---------------------------------------------------------------------------
# date command
# ---------------------------------------------------------------------------


@cli.command(name="date")
@click.argument("timestamp", type=float)
@click.option("--timezone", "-z", default=None, help="IANA time zone (defaults to configuration)")
@click.option("--config", "config_path", default=None, help="YAML configuration file")
@click.option("--runtime", "runtime_name", default=None, help="Override the configured runtime")
def date_command(
    timestamp: float,
    timezone: str | None,
    config_path: str | None,
    runtime_name: str | None,
) -> None:
    """Convert TIMESTAMP to calendar fields and back.

    TIMESTAMP is a POSIX time in seconds.

    Examples:

    \b
        nsbridge date 1700000000
        nsbridge date 1700000000 --timezone Asia/Tokyo
    """
    bridge = _init_or_exit(config_path, runtime_name)
    try:
        calendar = nsbridge.Calendar(
            identifier=bridge.config.calendar,
            timezone=timezone or bridge.config.timezone,
        )
    except ValueError as exc:
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    dates = bridge.dates
    with nsbridge.HandleScope(bridge.runtime) as scope:
        date = scope.own(bridge.runtime.date_with_timestamp(timestamp))
        fields_handle = scope.own(dates.to_calendar_fields(date, calendar))
        fields = dates.native_to_fields(fields_handle)
        resolved = scope.own(dates.to_date(fields_handle, calendar))
        round_trip = bridge.runtime.timestamp_of_date(resolved) if resolved else None

    table = Table(title=f"Calendar fields ({calendar.timezone or 'host zone'})")
    for name in ("year", "month", "day", "hour", "minute", "second"):
        table.add_column(name.capitalize(), justify="right")
    table.add_row(*(str(getattr(fields, name)) for name in ("year", "month", "day", "hour", "minute", "second")))
    console.print(table)

    if round_trip is None:
        err_console.print("[red]Calendar could not resolve the fields[/red]")
        sys.exit(1)
    console.print(f"[bold]Round trip:[/bold] {timestamp} → {round_trip}")
    if round_trip != timestamp:
        console.print("[yellow]Calendar fields carry whole seconds only; the fraction was dropped[/yellow]")


if __name__ == "__main__":
    cli()
