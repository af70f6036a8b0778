from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

_console: Console | None = None


def get_console() -> Console:
    """Return the shared Rich console instance for CLI output."""
    global _console  # noqa: PLW0603
    if _console is None:
        _console = Console(stderr=True)
    return _console


def require_file(path: Path, label: str) -> Path:
    """Resolve a user-provided path to an existing file.

    Raises:
        typer.Exit: If the path does not exist or is not a file.
    """
    resolved = Path(path).resolve()
    if not resolved.is_file():
        console = get_console()
        console.print(f"[red]{label} not found: {escape(str(resolved))}[/red]")
        raise typer.Exit(code=1)
    return resolved
