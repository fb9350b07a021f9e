"""``tg config`` commands: view and change ``[graph]`` settings."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import config, config_manager

console = Console()

config_app = typer.Typer(
    help="⚙️  Configuration — root naming, layout and watch settings.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@config_app.command("show")
def show_config():
    """Show the effective graph settings."""
    cfg = config_manager.load_config(config.CONFIG_FILE)

    table = Table(title="Graph settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Default", style="dim")
    for key, default in config_manager.DEFAULT_CONFIG.items():
        table.add_row(key, escape(repr(cfg[key])), escape(repr(default)))
    console.print(table)

    exists = config.CONFIG_FILE.exists()
    state = "" if exists else " (not created yet)"
    console.print(f"[dim]Config file: {escape(str(config.CONFIG_FILE))}{state}[/dim]")


@config_app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Setting name, e.g. root_suffix or layout."),
    value: str = typer.Argument(..., help="New value."),
):
    """Change one graph setting."""
    try:
        cfg = config_manager.save_config(config.CONFIG_FILE, **{key: value})
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    console.print(f"[green]✓[/green] {key} = {escape(repr(cfg[key]))}")


@config_app.command("reset")
def reset():
    """Restore default graph settings."""
    config_manager.reset_config(config.CONFIG_FILE)
    console.print("[green]✓[/green] Graph settings reset to defaults.")
