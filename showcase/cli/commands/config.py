"""showcase config — Show resolved showcase configuration."""

from rich import box
from rich.console import Console
from rich.table import Table

console = Console()


def config_show():
    """Show the resolved showcase configuration.

    Reads from environment variables and .env file.

    Example:
        showcase config
    """
    from showcase.config import ShowcaseSettings
    from showcase.runtime import is_enabled, resolve_preview_url

    cfg = ShowcaseSettings()

    table = Table(
        box=box.ROUNDED,
        header_style="bold dim",
        show_lines=False,
        title="[bold]showcase Configuration[/bold]",
    )
    table.add_column("Key", style="cyan", width=32)
    table.add_column("Value", width=40)
    table.add_column("Env Var", style="dim", width=40)

    sections = [
        ("App", ["log_level", "project_config"]),
        ("Preview Server", ["preview_url", "preview_port", "proxy_enabled", "proxy_port"]),
        ("Runtime Verification", [
            "runtime_validation", "propagation_delay_seconds", "request_timeout_seconds",
            "retry_attempts", "retry_delay_seconds", "retry_backoff", "story_prefix",
        ]),
        ("Static Validation", ["max_repair_passes", "strict_import_paths"]),
        ("Discovery", ["introspection_timeout_seconds"]),
    ]

    first = True
    for section_name, fields in sections:
        if not first:
            table.add_row("", "", "")
        first = False
        table.add_row(f"[bold dim]── {section_name} ──[/bold dim]", "", "")
        for attr in fields:
            val = getattr(cfg, attr, None)
            display = "[dim](not set)[/dim]" if val is None else str(val)
            table.add_row(f"  {attr}", display, f"SHOWCASE_{attr.upper()}")

    url = resolve_preview_url(cfg)
    table.add_row("", "", "")
    table.add_row("[bold dim]── Resolved ──[/bold dim]", "", "")
    table.add_row("  preview server", url or "[dim](none)[/dim]", "")
    table.add_row("  runtime verification", "enabled" if is_enabled(cfg) else "disabled", "")

    console.print()
    console.print(table)
    console.print()
    console.print("[dim]Source: environment variables + .env file (prefix: SHOWCASE_)[/dim]")
