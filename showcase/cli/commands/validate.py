"""showcase validate — Static validation and auto-repair of a story file."""

import asyncio
from pathlib import Path

import typer
from rich import box
from rich.console import Console
from rich.table import Table

console = Console()


def render_diagnostics(outcome) -> None:
    table = Table(box=box.ROUNDED, header_style="bold dim", show_lines=False)
    table.add_column("", width=3)
    table.add_column("Line", width=6, justify="right", style="dim")
    table.add_column("Code", style="cyan", width=24)
    table.add_column("Message", width=80)
    for d in outcome.diagnostics:
        icon = "[red]✗[/red]" if d.is_error else "[yellow]![/yellow]"
        table.add_row(icon, str(d.line) if d.line is not None else "", d.code, d.message)
    console.print(table)


def validate_file(
    file: Path = typer.Argument(..., help="Story file to validate"),
    dialect: str = typer.Option(None, "--dialect", "-d",
                                help="react, vue, angular, svelte or web-components (default: from showcase.yaml)"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to showcase.yaml"),
    strict: bool = typer.Option(False, "--strict", help="Require components to come from their catalog import path"),
    no_repair: bool = typer.Option(False, "--no-repair", help="Report only; do not attempt repairs"),
    write: bool = typer.Option(False, "--write", "-w", help="Write the repaired story back to FILE"),
):
    """Validate a generated story against the discovered component catalog.

    Exits with code 1 when errors remain after repair.

    Examples:
        showcase validate src/stories/Card.stories.tsx
        showcase validate Card.stories.svelte --dialect svelte
        showcase validate Card.stories.tsx --write
    """
    from showcase.callbacks import LoggingCallback
    from showcase.catalog import ComponentCatalog, NameOracle
    from showcase.cli.commands.catalog import load_project
    from showcase.config import settings
    from showcase.exceptions import ShowcaseError
    from showcase.types import Dialect
    from showcase.validation import StoryValidator

    if not file.is_file():
        console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    try:
        project = load_project(config_path)
        chosen = Dialect(dialect.lower()) if dialect else project.dialect
        catalog = asyncio.run(ComponentCatalog.from_config(
            project, introspection_timeout=settings.introspection_timeout_seconds,
        ))
    except ValueError:
        console.print(f"[red]Error:[/red] Unknown dialect: {dialect}")
        raise typer.Exit(1)
    except ShowcaseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    oracle = NameOracle(catalog, primary_import_path=project.import_path or None, deprecated=project.deprecated)
    validator = StoryValidator(
        oracle, chosen,
        strict_import_paths=strict or settings.strict_import_paths,
        story_prefix=settings.story_prefix,
    )
    outcome = validator.validate(file.read_text(), repair=not no_repair)
    asyncio.run(LoggingCallback().on_validation_complete(outcome, chosen))

    console.print()
    if outcome.diagnostics:
        render_diagnostics(outcome)
    if outcome.applied_repairs:
        console.print(f"[green]Repairs kept:[/green] {', '.join(outcome.applied_repairs)}")
        if write and outcome.repaired_artifact is not None:
            file.write_text(outcome.repaired_artifact)
            console.print(f"[green]Wrote repaired story to[/green] {file}")

    if outcome.is_valid:
        console.print(f"[green]✓ Valid[/green] [dim]({chosen.value}, {len(catalog)} known components)[/dim]")
        return
    console.print(f"[red]✗ {len(outcome.errors)} error(s)[/red]")
    raise typer.Exit(1)
