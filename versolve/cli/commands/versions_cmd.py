from pathlib import Path

import typer
from rich import box
from rich.markup import escape
from rich.table import Table

from versolve.cli._console import get_console, require_file
from versolve.config.settings import load_compiler_version
from versolve.registry.index import load_registry
from versolve.solver.exceptions import VersolveError


def do_versions(name: str, registry: Path) -> None:
    """List the known versions of a package, newest first.

    Args:
        name: Package name
        registry: Registry index file
    """
    console = get_console()
    registry_path = require_file(registry, "Registry index")

    try:
        repository = load_registry(registry_path, default_compiler_version=load_compiler_version())
    except VersolveError as exc:
        console.print(f"[red]{escape(exc.message)}[/red]")
        raise typer.Exit(code=1) from exc

    records = sorted(repository.records_of(name), key=lambda record: record.version, reverse=True)
    if not records:
        console.print(f"[yellow]No versions of '{escape(name)}' in {escape(str(registry_path))}.[/yellow]")
        raise typer.Exit(code=1)

    compiler_version = repository.compiler_version
    table = Table(title=escape(name), box=box.ROUNDED, show_header=True)
    table.add_column("Version", style="cyan")
    table.add_column("Compiler")
    table.add_column("Dependencies")
    for record in records:
        compiler_cell = str(record.compiler_constraint) if record.compiler_constraint else "any"
        if not record.supports_compiler(compiler_version):
            compiler_cell = f"[red]{compiler_cell}[/red]"
        dependencies_cell = ", ".join(f"{escape(dep)} {constraint}" for dep, constraint in sorted(record.dependencies.items()))
        table.add_row(str(record.version), compiler_cell, dependencies_cell or "-")
    console.print(table)
