"""CLI entry point.

Provides the main CLI application with commands for:
- serve: Run the API server
- devices: Browse the device catalog
- score: Score a device described in a JSON file
- shopping-list: Show what still needs to be bought
- gateways: Show gateway coverage and missing gateways per room
- topology: Show the connectivity graph as a tree
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from src.exceptions import PlannerError
from src.logging_config import configure_logging
from src.planner.catalog import filter_devices, sort_devices
from src.planner.compatibility import active_gateways, missing_gateway_report
from src.planner.enums import COLLECTION_CATEGORIES, DeviceCategory
from src.planner.models import DEVICE_MODELS, HouseSnapshot
from src.planner.scoring import score_device
from src.planner.shopping import build_shopping_list, format_price
from src.planner.topology import ROOT_NODE_ID, build_topology
from src.settings import get_settings

app = typer.Typer(
    name="planner",
    help="Smart home device catalog and house planner",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    configure_logging("DEBUG" if verbose else get_settings().log_level)


async def _load_snapshot() -> HouseSnapshot:
    """Read every collection from the database."""
    from src.dal import load_snapshot
    from src.storage import close_db, get_session

    try:
        async with get_session() as session:
            return await load_snapshot(session)
    finally:
        await close_db()


def _snapshot() -> HouseSnapshot:
    try:
        return asyncio.run(_load_snapshot())
    except PlannerError as e:
        console.print(f"[red]❌ Could not load the house: {e}[/red]")
        raise typer.Exit(code=1) from e


def _parse_category(value: str) -> DeviceCategory:
    """Accept a category (``other-device``) or a collection name (``other_devices``)."""
    if value in COLLECTION_CATEGORIES:
        return COLLECTION_CATEGORIES[value]
    try:
        return DeviceCategory(value)
    except ValueError:
        raise typer.BadParameter(f"Unknown category '{value}'") from None


@app.command()
def serve(
    host: Annotated[
        str,
        typer.Option("--host", "-h", help="Host to bind to"),
    ] = "",
    port: Annotated[
        int,
        typer.Option("--port", "-p", help="Port to bind to"),
    ] = 0,
    reload: Annotated[
        bool,
        typer.Option("--reload", "-r", help="Enable auto-reload for development"),
    ] = False,
    workers: Annotated[
        int,
        typer.Option("--workers", "-w", help="Number of worker processes"),
    ] = 0,
) -> None:
    """Start the planner API server.

    Defaults are loaded from settings (env vars / .env).
    """
    import uvicorn

    settings = get_settings()
    resolved_host = host or settings.api_host
    resolved_port = port or settings.api_port
    resolved_workers = workers or settings.api_workers

    console.print(
        Panel(
            f"[bold green]Starting House Planner API[/bold green]\n"
            f"Host: {resolved_host}\n"
            f"Port: {resolved_port}\n"
            f"Workers: {resolved_workers}\n"
            f"Reload: {reload}",
            title="🏠 Planner",
            border_style="green",
        )
    )

    uvicorn.run(
        "src.api.main:get_app",
        factory=True,
        host=resolved_host,
        port=resolved_port,
        reload=reload,
        workers=resolved_workers if not reload else 1,
        log_level=settings.log_level.lower(),
    )


@app.command()
def devices(
    category: Annotated[
        Optional[str],  # noqa: UP007
        typer.Option("--category", "-c", help="Category or collection name"),
    ] = None,
    tag: Annotated[
        Optional[str],  # noqa: UP007
        typer.Option("--tag", "-t", help="Only devices with this tag"),
    ] = None,
    search: Annotated[
        Optional[str],  # noqa: UP007
        typer.Option("--search", help="Case-insensitive name or brand match"),
    ] = None,
    sort: Annotated[
        str,
        typer.Option("--sort", "-s", help="newest, score, price or name"),
    ] = "score",
) -> None:
    """List catalog devices."""
    if sort not in ("newest", "score", "price", "name"):
        raise typer.BadParameter(f"Unknown sort '{sort}'")
    selected = _parse_category(category) if category else None

    snapshot = _snapshot()
    found = filter_devices(snapshot.devices, category=selected, tag=tag, search=search)
    found = sort_devices(found, sort)
    if not found:
        console.print("[yellow]No devices found.[/yellow]")
        return

    currency = get_settings().currency_symbol
    table = Table(title=f"Devices ({len(found)})", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Brand")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Owned", justify="right")
    table.add_column("Tags", style="dim")

    for device in found:
        score_color = "green" if device.score >= 7 else "yellow" if device.score >= 4 else "red"
        table.add_row(
            device.name,
            device.brand,
            str(device.category),
            f"[{score_color}]{device.score:.1f}[/{score_color}]",
            format_price(device.price, currency),
            str(device.quantity),
            ", ".join(device.tags),
        )

    console.print(table)


@app.command()
def score(
    path: Annotated[
        Path,
        typer.Argument(help="JSON file with the device fields, including 'category'"),
    ],
) -> None:
    """Score a device without saving it."""
    try:
        payload = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]❌ Cannot read {path}: {e}[/red]")
        raise typer.Exit(code=1) from e

    category = _parse_category(str(payload.get("category", "")))
    payload["category"] = str(category)
    try:
        device = DEVICE_MODELS[category].model_validate(payload)
    except PydanticValidationError as e:
        console.print(f"[red]❌ Invalid device: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[bold]{device.name}[/bold] ({category}): [green]{score_device(device):.1f}[/green] / 10")


@app.command(name="shopping-list")
def shopping_list() -> None:
    """Show devices still to buy, grouped by category."""
    result = build_shopping_list(_snapshot())
    currency = get_settings().currency_symbol

    if not result.items:
        console.print("[green]✅ Nothing left to buy.[/green]")
        return

    for section in result.sections():
        table = Table(title=section.key.capitalize(), show_header=True)
        table.add_column("Name", style="cyan")
        table.add_column("Device")
        table.add_column("Brand")
        table.add_column("Price", justify="right")
        for item in section.items:
            table.add_row(item.custom_name, item.base_name, item.brand, format_price(item.price, currency))
        table.add_row("", "", "[bold]Subtotal[/bold]", format_price(section.subtotal, currency))
        console.print(table)

    console.print(
        Panel(
            f"[bold]{len(result.items)}[/bold] item(s), total "
            f"[bold green]{format_price(result.total_price, currency)}[/bold green]",
            title="🛒 Shopping list",
            border_style="green",
        )
    )


@app.command()
def gateways() -> None:
    """Show active gateways and rooms with devices no gateway can reach."""
    snapshot = _snapshot()

    hubs = active_gateways(snapshot)
    table = Table(title="Active gateways", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Protocols")
    for hub in hubs:
        table.add_row(hub.name, hub.kind, ", ".join(str(p) for p in hub.protocols))
    if hubs:
        console.print(table)
    else:
        console.print("[yellow]No gateways assigned to the house.[/yellow]")

    report = missing_gateway_report(snapshot)
    if not report:
        console.print("[green]✅ Every device has a gateway for its protocol.[/green]")
        return

    for warning in report.values():
        lines = [
            f"[bold]{protocol}[/bold]: {', '.join(names)}"
            for protocol, names in warning.missing.items()
        ]
        console.print(
            Panel(
                "\n".join(lines),
                title=f"⚠️  {warning.room_name} ({warning.device_count} device(s) without gateway)",
                border_style="yellow",
            )
        )


@app.command()
def topology(
    offline: Annotated[
        bool,
        typer.Option("--offline", help="Drop cloud integrations as if the internet were down"),
    ] = False,
    hide: Annotated[
        Optional[list[str]],  # noqa: UP007
        typer.Option("--hide", help="Room id to collapse (repeatable)"),
    ] = None,
) -> None:
    """Print the connectivity graph as a tree rooted at Home Assistant."""
    graph = build_topology(_snapshot(), hide or [], internet_offline=offline)

    root = Tree(f"[bold]{graph.nodes[ROOT_NODE_ID]['name']}[/bold]")
    for hub_id, _, _ in graph.in_edges(ROOT_NODE_ID, keys=True):
        hub = graph.nodes[hub_id]
        branch = root.add(f"[cyan]{hub['name']}[/cyan] [dim]({hub['kind']})[/dim]")
        for room_id, _, protocol in graph.in_edges(hub_id, keys=True):
            room = graph.nodes[room_id]
            branch.add(f"{room['name']} [dim]via {protocol}[/dim]")

    console.print(root)

    hidden = [data["name"] for _, data in graph.nodes(data=True) if data.get("hidden")]
    if hidden:
        console.print(f"[dim]Hidden rooms: {', '.join(hidden)}[/dim]")
    unreachable = [
        data["name"]
        for node_id, data in graph.nodes(data=True)
        if data["kind"] == "room" and not data.get("hidden") and graph.out_degree(node_id) == 0
    ]
    if unreachable:
        console.print(f"[yellow]Not connected: {', '.join(unreachable)}[/yellow]")


if __name__ == "__main__":
    app()
