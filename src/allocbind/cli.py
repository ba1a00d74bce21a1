"""Command-line interface for allocbind."""

import json
import logging
from collections.abc import Callable
from typing import Any, TextIO, TypeVar

import click
import yaml
from rich.logging import RichHandler
from rich.table import Table

from allocbind import __version__
from allocbind.allocations import (
    Allocation,
    AllocationError,
    NetworkPolicy,
    docker_bindings,
    exposed_ports,
)
from allocbind.config import AllocbindConfig, DockerConfig, NetworkConfig, load_config
from allocbind.console import console
from allocbind.runtime import (
    detect_bridge_interface,
    outgoing_network,
    to_exposed_ports,
    to_port_bindings,
    to_sdk_ports,
)

F = TypeVar("F", bound=Callable[..., Any])


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"allocbind [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


def _read_allocation(source: TextIO) -> Allocation:
    """Parse a YAML or JSON allocation document."""
    try:
        data = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise AllocationError(f"Cannot parse allocation: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise AllocationError("Allocation document must be a mapping")
    return Allocation.from_dict(data)


def _resolve_policy(interface: str | None, ispn: bool | None) -> NetworkPolicy:
    """Load the current config and apply command-line overrides."""
    overrides = AllocbindConfig(
        docker=DockerConfig(network=NetworkConfig(interface=interface, ispn=ispn))
    )
    return NetworkPolicy.from_config(load_config().merge(overrides))


def _load(source: TextIO) -> Allocation:
    try:
        return _read_allocation(source)
    except AllocationError as e:
        console.print(f"[red]✗[/red] {e}")
        raise SystemExit(1) from e


def policy_options(func: F) -> F:
    """Add --interface and --ispn/--no-ispn to a command."""
    func = click.option(
        "--ispn/--no-ispn",
        default=None,
        help="Drop loopback bindings instead of rewriting them.",
    )(func)
    func = click.option(
        "--interface",
        "-i",
        default=None,
        help="Bridge interface IP substituted for 127.0.0.1.",
    )(func)
    return func


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """allocbind - compute Docker port bindings from server allocations."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    if ctx.invoked_subcommand is None:
        console.print("[bold]allocbind[/bold] - allocation to port binding mapper")
        console.print("\nRun [cyan]allocbind --help[/cyan] for available commands.")


@main.command()
@click.argument("allocation_file", type=click.File("r"))
@click.option("--json", "as_json", is_flag=True, help="Print Engine API JSON.")
@click.option(
    "--sdk",
    is_flag=True,
    help="Print the ports= argument for the Docker SDK's containers.create().",
)
@policy_options
def bindings(
    allocation_file: TextIO,
    as_json: bool,
    sdk: bool,
    interface: str | None,
    ispn: bool | None,
) -> None:
    """Show the port bindings for an allocation file.

    ALLOCATION_FILE is a YAML or JSON document with force_outgoing_ip,
    default and mappings keys. Use - to read from stdin.
    """
    allocation = _load(allocation_file)
    policy = _resolve_policy(interface, ispn)
    table = docker_bindings(allocation, policy)

    if sdk:
        click.echo(json.dumps(to_sdk_ports(table), indent=2, sort_keys=True))
        return

    if as_json:
        click.echo(json.dumps(to_port_bindings(table), indent=2, sort_keys=True))
        return

    if not table:
        console.print("[dim]No valid ports allocated.[/dim]")
        return

    out = Table(title="Port bindings")
    out.add_column("Port", style="cyan")
    out.add_column("Host IP")
    out.add_column("Host port")
    for port in sorted(table):
        binds = table[port]
        if not binds:
            out.add_row(port, "[dim]-[/dim]", "[dim]-[/dim]")
        for binding in binds:
            out.add_row(port, binding.host_ip, binding.host_port)
    console.print(out)

    network = outgoing_network(allocation)
    if network is not None:
        console.print(
            f"[dim]Outgoing traffic is routed through network {network.name}[/dim]"
        )


@main.command()
@click.argument("allocation_file", type=click.File("r"))
@click.option("--json", "as_json", is_flag=True, help="Print Engine API JSON.")
@policy_options
def exposed(
    allocation_file: TextIO,
    as_json: bool,
    interface: str | None,
    ispn: bool | None,
) -> None:
    """Show the exposed ports for an allocation file."""
    allocation = _load(allocation_file)
    policy = _resolve_policy(interface, ispn)
    ports = exposed_ports(docker_bindings(allocation, policy))

    if as_json:
        click.echo(json.dumps(to_exposed_ports(ports), indent=2))
        return

    if not ports:
        console.print("[dim]No exposed ports.[/dim]")
        return

    console.print(f"[bold]Exposed ports ({len(ports)}):[/bold]")
    for port in sorted(ports):
        console.print(f"  [cyan]{port}[/cyan]")


@main.command()
@click.option(
    "--detect",
    is_flag=True,
    help="Ask Docker for the gateway of the configured bridge network.",
)
def config(detect: bool) -> None:
    """Show the effective Docker network configuration."""
    network = load_config().docker.network
    console.print("[bold]Docker network:[/bold]")
    console.print(f"  Name:      [cyan]{network.name}[/cyan]")
    console.print(f"  Interface: [cyan]{network.interface}[/cyan]")
    console.print(f"  ISPN:      [cyan]{network.ispn}[/cyan]")

    if not detect:
        return

    gateway = detect_bridge_interface(network.name or "")
    if gateway is None:
        console.print("[yellow]⚠[/yellow] Could not detect the bridge gateway.")
        raise SystemExit(1)
    if gateway == network.interface:
        console.print(f"[green]✓[/green] Bridge gateway matches: {gateway}")
    else:
        console.print(
            f"[yellow]⚠[/yellow] Bridge gateway is {gateway}, "
            f"configured interface is {network.interface}"
        )
