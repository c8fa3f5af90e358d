"""CLI entry point for the Plugwise hub toolkit."""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .core.config import Config, HubCredential, get_config
from .core.exceptions import PlugwiseHubError
from .discovery import DeviceStore, DiscoveryEngine, HubRegistry, HubStore, add_hub
from .gateway import GatewayClient
from .gateway.client import DHW_MODES, GATEWAY_MODES, REGULATION_MODES

console = Console()


def print_error(message: str) -> None:
    """Print error message in red."""
    console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print success message in green."""
    console.print(f"[green]✓[/green] {message}")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _hub_table(title: str, hubs: list) -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("IP Address", style="green")
    table.add_column("Model", style="yellow")
    table.add_column("Firmware", style="magenta")
    table.add_column("Discovered", style="dim")

    for hub in hubs:
        table.add_row(
            hub.name,
            hub.ip,
            hub.model or "-",
            hub.firmware or "-",
            hub.discovered_at.strftime("%Y-%m-%d %H:%M:%S"),
        )
    return table


@click.group()
@click.version_option(version=__version__, prog_name="plugwise-hub")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--hubs-dir", type=click.Path(file_okay=False), help="Directory of stored hubs")
@click.pass_context
def main(ctx: click.Context, verbose: bool, hubs_dir: str | None) -> None:
    """Plugwise hub toolkit - discover gateways and read or control their devices."""
    ctx.ensure_object(dict)
    config = get_config()
    config.verbose = verbose
    if hubs_dir:
        config.hubs_dir = Path(hubs_dir)
    _setup_logging(verbose)

    store = HubStore(config.hubs_dir)
    registry = HubRegistry(store.load_all())
    ctx.obj["config"] = config
    ctx.obj["store"] = store
    ctx.obj["devices"] = DeviceStore(config.devices_dir)
    ctx.obj["registry"] = registry
    ctx.obj["engine"] = DiscoveryEngine(config.discovery, config.gateway, registry)


@main.command()
@click.option("--network", "-n", help="Network to scan in CIDR form (default: local /24)")
@click.option("--password", "-p", "passwords", multiple=True, help="Hub password (repeatable)")
@click.option("--timeout", type=float, help="Timeout per probe in seconds")
@click.option("--workers", type=int, help="Maximum concurrent probes")
@click.option("--output", "-o", type=click.Path(), help="Output file (JSON)")
@click.pass_context
def scan(
    ctx: click.Context,
    network: str | None,
    passwords: tuple[str, ...],
    timeout: float | None,
    workers: int | None,
    output: str | None,
) -> None:
    """Scan the network for hubs using the configured passwords."""
    config: Config = ctx.obj["config"]
    engine: DiscoveryEngine = ctx.obj["engine"]
    store: HubStore = ctx.obj["store"]

    if timeout is not None:
        config.discovery.probe_timeout = timeout
    if workers is not None:
        config.discovery.max_workers = workers

    credentials = [HubCredential(p) for p in passwords] or list(config.credentials)
    for hub in store.load_all():
        if hub.password not in {c.password for c in credentials}:
            credentials.append(HubCredential(hub.password, hub.ip))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Scanning for hubs...", total=None)
        try:
            result = engine.scan(credentials, network=network)
        except PlugwiseHubError as e:
            print_error(str(e))
            sys.exit(1)
        progress.update(task, completed=True)

    for hub in result.discovered:
        try:
            store.save(hub)
        except PlugwiseHubError as e:
            print_error(f"Could not store hub {hub.name}: {e}")

    if not result.discovered:
        console.print(f"[yellow]No hubs found ({result.scanned_count} addresses scanned).[/yellow]")
    else:
        console.print(_hub_table(f"Discovered Hubs ({result.found_count})", result.discovered))
        console.print(f"[dim]{result.scanned_count} addresses scanned[/dim]")

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        print_success(f"Results saved to {output_path}")


@main.command("add-hub")
@click.argument("password")
@click.option("--network", "-n", help="Network to scan in CIDR form (default: local /24)")
@click.pass_context
def add_hub_command(ctx: click.Context, password: str, network: str | None) -> None:
    """Find a hub by its password and store it."""
    try:
        hub = add_hub(password, ctx.obj["engine"], ctx.obj["store"], network=network)
    except PlugwiseHubError as e:
        print_error(str(e))
        sys.exit(1)

    if hub is None:
        print_error(f"Hub {password!r} not found. Check that it is powered and on this network.")
        sys.exit(1)

    print_success(f"Hub {hub.name} at {hub.ip} ({hub.model or 'unknown model'})")


@main.command("list-hubs")
@click.pass_context
def list_hubs(ctx: click.Context) -> None:
    """List stored hubs."""
    registry: HubRegistry = ctx.obj["registry"]
    hubs = registry.list()

    if not hubs:
        console.print("[yellow]No hubs stored. Run 'plugwise-hub scan' first.[/yellow]")
        return

    console.print(_hub_table(f"Stored Hubs ({len(hubs)})", hubs))


def _resolve_hub(ctx: click.Context, host: str | None, password: str | None) -> tuple[str, str]:
    registry: HubRegistry = ctx.obj["registry"]

    if host is None or password is None:
        hub = registry.get(host) if host else registry.first()
        if hub is None:
            print_error("No hub given and none stored. Use --host/--password or run a scan.")
            sys.exit(1)
        host = hub.ip
        password = password or hub.password
    return host, password


def _connect(ctx: click.Context, host: str | None, password: str | None) -> GatewayClient:
    config: Config = ctx.obj["config"]
    host, password = _resolve_hub(ctx, host, password)

    client = GatewayClient(host, password, config=config.gateway)
    try:
        client.connect()
    except PlugwiseHubError as e:
        print_error(f"Cannot connect to {host}: {e}")
        sys.exit(1)
    return client


def hub_options(func):
    func = click.option("--password", help="Hub password")(func)
    func = click.option("--host", help="Hub IP address (default: first stored hub)")(func)
    return func


def _run(action, *args, **kwargs):
    try:
        return action(*args, **kwargs)
    except PlugwiseHubError as e:
        print_error(str(e))
        sys.exit(1)


def _entity_table(title: str, entities: list) -> Table:
    table = Table(title=f"{title} ({len(entities)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Class", style="yellow")
    table.add_column("Sensors", style="green")
    table.add_column("Switches", style="magenta")
    table.add_column("Setpoint", justify="right")

    for entity in entities:
        sensors = ", ".join(f"{k}={v:g}" for k, v in sorted(entity.sensors.items()))
        switches = ", ".join(f"{k}={'on' if v else 'off'}" for k, v in entity.switches.items())
        setpoint = "-"
        if entity.thermostat and entity.thermostat.setpoint is not None:
            setpoint = f"{entity.thermostat.setpoint:g}"
        table.add_row(entity.id, entity.name, entity.dev_class, sensors or "-", switches or "-", setpoint)
    return table


@main.command()
@hub_options
@click.option("--json", "as_json", is_flag=True, help="Print the snapshot as JSON")
@click.pass_context
def devices(ctx: click.Context, host: str | None, password: str | None, as_json: bool) -> None:
    """Show all devices and zones of a hub."""
    host, password = _resolve_hub(ctx, host, password)
    client = _connect(ctx, host, password)
    snapshot = _run(client.get_devices)

    device_store: DeviceStore = ctx.obj["devices"]
    try:
        device_store.save_devices(password, snapshot.entities)
    except PlugwiseHubError as e:
        print_error(f"Could not store devices: {e}")

    if as_json:
        click.echo(json.dumps(snapshot.to_dict(), indent=2))
        return

    info = snapshot.gateway_info
    console.print(f"[bold]{info.name}[/bold] {info.model} ({info.type.value}, firmware {info.version})")
    console.print(_entity_table("Devices", snapshot.devices()))
    console.print(_entity_table("Zones", snapshot.zones()))


@main.command("stored-devices")
@click.option("--hub", "hub_password", help="Only devices of the hub with this password")
@click.pass_context
def stored_devices(ctx: click.Context, hub_password: str | None) -> None:
    """List devices recorded by earlier 'devices' runs, without contacting a hub."""
    device_store: DeviceStore = ctx.obj["devices"]
    records = _run(device_store.load_devices, hub_password) if hub_password else device_store.load_all()

    if not records:
        console.print("[yellow]No devices stored. Run 'plugwise-hub devices' first.[/yellow]")
        return

    table = Table(title=f"Stored Devices ({len(records)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Class", style="yellow")
    table.add_column("Capabilities", style="green")

    for device in records:
        caps = device.capabilities
        flags = [
            name
            for name, present in (
                ("temperature", caps.has_temperature),
                ("switch", caps.has_switch),
                ("presets", caps.has_presets),
                ("sensors", caps.has_sensors),
            )
            if present
        ]
        table.add_row(device.id, device.name, device.dev_class, ", ".join(flags) or "-")

    console.print(table)


@main.command("set-temperature")
@click.argument("location_id")
@click.argument("setpoint", type=float)
@hub_options
@click.pass_context
def set_temperature(ctx: click.Context, location_id: str, setpoint: float, host: str | None, password: str | None) -> None:
    """Set the thermostat setpoint of a zone."""
    client = _connect(ctx, host, password)
    _run(client.set_temperature, location_id, setpoint=setpoint)
    print_success(f"Setpoint of {location_id} set to {setpoint:g}")


@main.command("set-preset")
@click.argument("location_id")
@click.argument("preset")
@hub_options
@click.pass_context
def set_preset(ctx: click.Context, location_id: str, preset: str, host: str | None, password: str | None) -> None:
    """Activate a preset (home, away, asleep, ...) on a zone."""
    client = _connect(ctx, host, password)
    _run(client.set_preset, location_id, preset)
    print_success(f"Preset of {location_id} set to {preset}")


@main.command()
@click.argument("appliance_id")
@click.argument("state", type=click.Choice(["on", "off"]))
@click.option("--lock", is_flag=True, help="Switch the relay lock instead of the relay")
@hub_options
@click.pass_context
def switch(
    ctx: click.Context,
    appliance_id: str,
    state: str,
    lock: bool,
    host: str | None,
    password: str | None,
) -> None:
    """Switch a relay on or off."""
    client = _connect(ctx, host, password)
    _run(client.set_switch_state, appliance_id, state, model="lock" if lock else "relay")
    print_success(f"{'Lock' if lock else 'Relay'} of {appliance_id} switched {state}")


@main.command("gateway-mode")
@click.argument("mode", type=click.Choice(GATEWAY_MODES))
@hub_options
@click.pass_context
def gateway_mode(ctx: click.Context, mode: str, host: str | None, password: str | None) -> None:
    """Set the gateway mode."""
    client = _connect(ctx, host, password)
    _run(client.set_gateway_mode, mode)
    print_success(f"Gateway mode set to {mode}")


@main.command("dhw-mode")
@click.argument("mode", type=click.Choice(DHW_MODES))
@hub_options
@click.pass_context
def dhw_mode(ctx: click.Context, mode: str, host: str | None, password: str | None) -> None:
    """Set the domestic hot water mode."""
    client = _connect(ctx, host, password)
    _run(client.set_dhw_mode, mode)
    print_success(f"DHW mode set to {mode}")


@main.command("regulation-mode")
@click.argument("mode", type=click.Choice(REGULATION_MODES))
@hub_options
@click.pass_context
def regulation_mode(ctx: click.Context, mode: str, host: str | None, password: str | None) -> None:
    """Set the heating regulation mode."""
    client = _connect(ctx, host, password)
    _run(client.set_regulation_mode, mode)
    print_success(f"Regulation mode set to {mode}")


@main.command("temperature-offset")
@click.argument("appliance_id")
@click.argument("offset", type=float)
@hub_options
@click.pass_context
def temperature_offset(ctx: click.Context, appliance_id: str, offset: float, host: str | None, password: str | None) -> None:
    """Set the temperature calibration offset of a thermostat."""
    client = _connect(ctx, host, password)
    _run(client.set_temperature_offset, appliance_id, offset)
    print_success(f"Temperature offset of {appliance_id} set to {offset:g}")


@main.command("delete-notification")
@hub_options
@click.pass_context
def delete_notification(ctx: click.Context, host: str | None, password: str | None) -> None:
    """Clear the active gateway notification."""
    client = _connect(ctx, host, password)
    _run(client.delete_notification)
    print_success("Notification deleted")


@main.command()
@hub_options
@click.confirmation_option(prompt="Reboot the gateway?")
@click.pass_context
def reboot(ctx: click.Context, host: str | None, password: str | None) -> None:
    """Reboot the gateway."""
    client = _connect(ctx, host, password)
    _run(client.reboot_gateway)
    print_success("Reboot requested")


if __name__ == "__main__":
    main()
