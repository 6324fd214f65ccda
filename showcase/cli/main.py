"""showcase CLI — Typer application."""

import logging

import typer
from rich.console import Console

from showcase.version import __version__

app = typer.Typer(
    name="showcase",
    help="showcase — discover components, then validate and verify generated stories.",
    no_args_is_help=True,
    invoke_without_command=True,
)
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", is_eager=True, help="Show version"),
):
    """showcase CLI."""
    if version:
        console.print(f"showcase v{__version__}")
        raise typer.Exit()
    from showcase.config import settings
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


# ── Discovery ──────────────────────────────────────────────────────────────────
from showcase.cli.commands import catalog  # noqa: E402

app.command(name="catalog", help="Discover components and show the resolved catalog")(catalog.catalog_show)

# ── Validation & verification ──────────────────────────────────────────────────
from showcase.cli.commands import check, validate, verify  # noqa: E402

app.command(name="validate", help="Statically validate (and repair) a story file")(validate.validate_file)
app.command(name="verify", help="Check a written story against the live preview server")(verify.verify_story)
app.command(name="check", help="Extract, validate, write and verify an LLM response")(check.check_response)

# ── Settings ───────────────────────────────────────────────────────────────────
from showcase.cli.commands import config  # noqa: E402

app.command(name="config", help="Show resolved configuration")(config.config_show)


if __name__ == "__main__":
    app()
