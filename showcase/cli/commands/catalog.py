"""showcase catalog — Discover components and show the resolved catalog."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

console = Console()

_ORIGIN_COLOR = {
    "user_override": "magenta",
    "local_file_scan": "green",
    "installed_package": "cyan",
    "declarative_manifest": "yellow",
}


def load_project(config_path: Optional[str]):
    """showcase.yaml from --config, SHOWCASE_PROJECT_CONFIG, ./showcase.yaml or the defaults."""
    from showcase.config import load_project_config, settings

    explicit = config_path or settings.project_config
    return load_project_config(Path(explicit) if explicit else None)


def catalog_show(
    config_path: str = typer.Option(None, "--config", "-c", help="Path to showcase.yaml"),
    as_json: bool = typer.Option(False, "--json", help="Print the catalog as JSON"),
):
    """Build the component catalog from every configured source.

    Sources: installed packages, local directories, custom-elements manifests
    and hand-written overrides. When two sources name the same component the
    higher-priority one wins (override > local > package > manifest).

    Examples:
        showcase catalog
        showcase catalog --json
        showcase catalog --config ./design-system/showcase.yaml
    """
    from showcase.callbacks import LoggingCallback
    from showcase.catalog import ComponentCatalog
    from showcase.config import settings
    from showcase.exceptions import ShowcaseError

    try:
        project = load_project(config_path)
        catalog = asyncio.run(ComponentCatalog.from_config(
            project, introspection_timeout=settings.introspection_timeout_seconds,
        ))
        asyncio.run(LoggingCallback().on_catalog_built(list(catalog.records)))
    except ShowcaseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps([r.model_dump(mode="json") for r in catalog.records]))
        return

    if not len(catalog):
        console.print("[yellow]No components discovered.[/yellow]")
        console.print("[dim]Add packages, directories, manifests or overrides to showcase.yaml.[/dim]")
        return

    table = Table(
        box=box.ROUNDED,
        header_style="bold dim",
        show_lines=False,
        title=f"[bold]Component Catalog[/bold] [dim]({len(catalog)})[/dim]",
    )
    table.add_column("Name", style="bold", width=24)
    table.add_column("Category", width=11)
    table.add_column("Origin", width=20)
    table.add_column("Import Path", width=28)
    table.add_column("Props", style="dim", width=40)

    for r in catalog.records:
        color = _ORIGIN_COLOR.get(r.origin.value, "white")
        props = ", ".join(r.props[:6]) + (" …" if len(r.props) > 6 else "")
        table.add_row(r.name, r.category.value, f"[{color}]{r.origin.value}[/{color}]", r.import_path, props)

    console.print()
    console.print(table)
    console.print()
    console.print(f"[dim]Primary import path: {catalog.primary_import_path or '(none)'}[/dim]")
