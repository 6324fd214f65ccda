"""showcase verify — Check a written story against the live preview server."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

console = Console()


def render_runtime(result) -> None:
    from showcase.validation import format_runtime_feedback

    if result.passed:
        body = f"[green]{result.state.value}[/green]"
        if result.story_id:
            body += f"  [dim]{result.story_id}[/dim]"
        if result.details:
            body += f"\n[dim]{result.details}[/dim]"
        console.print(Panel(body, title="[bold]Runtime Check[/bold]", border_style="green"))
        return
    console.print(Panel(
        f"[red]{result.state.value}[/red] [dim]({result.error_kind.value if result.error_kind else '?'})[/dim]\n"
        f"{format_runtime_feedback(result)}",
        title="[bold]Runtime Check[/bold]",
        border_style="red",
    ))


def verify_story(
    title: str = typer.Argument(None, help="Story title, e.g. 'Product Card' or 'Generated/Product Card'"),
    file: Path = typer.Option(None, "--file", "-f", help="Read the title from this story file"),
    url: str = typer.Option(None, "--url", help="Preview server base URL (overrides settings)"),
    force: bool = typer.Option(False, "--force", help="Verify even if runtime validation is disabled"),
):
    """Poll the preview server until the story appears, then check that it renders.

    Exits with code 1 when the story is missing or fails to render.

    Examples:
        showcase verify "Product Card"
        showcase verify --file src/stories/generated/product-card.stories.tsx
        showcase verify "Product Card" --url http://localhost:6007 --force
    """
    from showcase.exceptions import ShowcaseError
    from showcase.runtime import RuntimeVerifier

    if not title and not file:
        console.print("[red]Error:[/red] Pass a TITLE or --file")
        raise typer.Exit(1)
    if file and not file.is_file():
        console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    overrides = {}
    if url:
        overrides["base_url"] = url
    if force:
        overrides["enabled"] = True
    try:
        verifier = RuntimeVerifier.from_settings(**overrides)
    except ShowcaseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    with console.status("[dim]Waiting for the preview server...[/dim]"):
        if file:
            result = asyncio.run(verifier.verify_artifact(file.read_text(), fallback_title=title or file.stem))
        else:
            result = asyncio.run(verifier.verify(title))

    render_runtime(result)
    if not result.passed:
        raise typer.Exit(1)
