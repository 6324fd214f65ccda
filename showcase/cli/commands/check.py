"""showcase check — Run one LLM response through the whole pipeline."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console

console = Console()


def _file_writer(out: Path):
    def write(text: str) -> Path:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text)
        return out
    return write


async def _check(response: str, out: Path, title, config_path, dialect):
    from showcase.callbacks import LoggingCallback
    from showcase.cli.commands.catalog import load_project
    from showcase.pipeline import StoryPipeline

    project = load_project(config_path)
    pipeline = await StoryPipeline.from_config(
        project,
        dialect=dialect,
        writer=_file_writer(out),
        callbacks=[LoggingCallback()],
    )
    return await pipeline.process(response, title=title)


def check_response(
    response_file: Path = typer.Argument(..., help="File holding the raw LLM response"),
    out: Path = typer.Option(..., "--out", "-o", help="Where to write the accepted story"),
    title: str = typer.Option(None, "--title", "-t", help="Fallback title if the story declares none"),
    dialect: str = typer.Option(None, "--dialect", "-d", help="Override the dialect from showcase.yaml"),
    config_path: str = typer.Option(None, "--config", "-c", help="Path to showcase.yaml"),
):
    """Extract → validate → write → verify.

    The story is written only when static validation passes. Prints
    regeneration feedback and exits with code 1 when any stage rejects it.

    Examples:
        showcase check response.md --out src/stories/generated/card.stories.tsx
        showcase check response.md -o Card.stories.svelte --dialect svelte
    """
    from showcase.cli.commands.validate import render_diagnostics
    from showcase.cli.commands.verify import render_runtime
    from showcase.exceptions import ShowcaseError
    from showcase.types import Dialect, PipelineStage

    if not response_file.is_file():
        console.print(f"[red]Error:[/red] File not found: {response_file}")
        raise typer.Exit(1)
    try:
        chosen = Dialect(dialect.lower()) if dialect else None
    except ValueError:
        console.print(f"[red]Error:[/red] Unknown dialect: {dialect}")
        raise typer.Exit(1)

    try:
        result = asyncio.run(_check(response_file.read_text(), out, title, config_path, chosen))
    except ShowcaseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    console.print()
    if result.validation and result.validation.diagnostics:
        render_diagnostics(result.validation)
    if result.runtime is not None:
        render_runtime(result.runtime)
    if result.written_to:
        console.print(f"[dim]Written to {result.written_to}[/dim]")

    if result.accepted:
        console.print("[green]✓ Story accepted[/green]")
        return
    if result.stage == PipelineStage.WRITE:
        console.print(f"[red]Error:[/red] Could not write story: {result.error}")
    else:
        console.print(f"[red]✗ Rejected at {result.stage.value}[/red]")
        if result.feedback and result.stage != PipelineStage.RUNTIME:
            console.print(result.feedback)
    raise typer.Exit(1)
