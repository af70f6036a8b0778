"""Config commands for managing solver settings.

Provides set, get, and list operations for the settings stored
in ``~/.versolve/settings``.
"""

import typer
from rich import box
from rich.markup import escape
from rich.table import Table

from versolve.cli._console import get_console
from versolve.config.settings import (
    VALID_KEYS,
    SettingEntry,
    get_setting_value,
    list_settings,
    resolve_key,
    set_setting_value,
)
from versolve.solver.exceptions import SettingsError


def _unknown_key(key: str) -> None:
    console = get_console()
    console.print(f"[red]Unknown config key: '{escape(key)}'[/red]")
    console.print(f"[dim]Valid keys: {', '.join(VALID_KEYS)}[/dim]")


def _display_value(entry: SettingEntry) -> str:
    if entry.key == "max_steps" and entry.value.strip() == "0":
        return "0 (unlimited)"
    return entry.value or "(empty)"


def do_config_set(key: str, value: str) -> None:
    """Set a setting value.

    Args:
        key: The CLI key name (e.g. "compiler-version", "max-steps").
        value: The value to store.
    """
    internal_key = resolve_key(key)
    if internal_key is None:
        _unknown_key(key)
        return

    try:
        set_setting_value(internal_key, value)
    except SettingsError as exc:
        get_console().print(f"[red]{escape(exc.message)}[/red]")
        raise typer.Exit(code=1) from exc
    get_console().print(f"[green]Set '{escape(key)}' = '{escape(value)}'[/green]")


def do_config_get(key: str) -> None:
    """Get a setting value and display it with its source."""
    internal_key = resolve_key(key)
    if internal_key is None:
        _unknown_key(key)
        return

    entry = get_setting_value(internal_key)
    get_console().print(f"[bold]{escape(key)}[/bold] = {escape(_display_value(entry))}  [dim](source: {entry.source})[/dim]")


def do_config_list() -> None:
    """List all setting values with their sources."""
    table = Table(title="versolve Configuration", box=box.ROUNDED, show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")

    for entry in list_settings():
        table.add_row(escape(entry.cli_key), escape(_display_value(entry)), str(entry.source))

    get_console().print(table)
