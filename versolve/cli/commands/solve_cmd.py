from pathlib import Path

import typer
from rich import box
from rich.markup import escape
from rich.table import Table

from versolve.cli._console import get_console, require_file
from versolve.config.settings import load_compiler_version, load_max_steps
from versolve.registry.index import load_registry
from versolve.registry.lock_file import write_lock_file
from versolve.registry.manifest import load_requirements
from versolve.solver.exceptions import VersolveError
from versolve.solver.solver import NoSolution, NoSolutionReason, solve
from versolve.solver.version import Version


def do_solve(
    manifest: Path,
    registry: Path,
    compiler: str | None = None,
    max_steps: int | None = None,
    include_test: bool = True,
    lock: Path | None = None,
) -> None:
    """Solve the manifest's requirements against a registry index and print the result.

    Args:
        manifest: Project manifest holding [dependencies] / [test-dependencies]
        registry: Registry index file
        compiler: Compiler version to solve for (overrides the index and settings)
        max_steps: Search budget (overrides settings; 0 means unlimited)
        include_test: Whether test dependencies take part
        lock: Where to write the lock file, if anywhere
    """
    console = get_console()
    manifest_path = require_file(manifest, "Manifest")
    registry_path = require_file(registry, "Registry index")

    try:
        compiler_override = Version.parse(compiler) if compiler else None
        default_compiler = None if compiler_override else load_compiler_version()
        step_budget = load_max_steps() if max_steps is None else (max_steps or None)
        requirements = load_requirements(manifest_path, include_test=include_test)
        repository = load_registry(
            registry_path,
            compiler_version=compiler_override,
            default_compiler_version=default_compiler,
        )
    except VersolveError as exc:
        console.print(f"[red]{escape(exc.message)}[/red]")
        raise typer.Exit(code=1) from exc

    result = solve(requirements, repository, max_steps=step_budget)

    if isinstance(result, NoSolution):
        match result.reason:
            case NoSolutionReason.UNSATISFIABLE:
                console.print(f"[red]No compatible versions for compiler {repository.compiler_version}.[/red]")
            case NoSolutionReason.STEP_LIMIT:
                console.print(f"[red]Gave up after {result.steps} steps without finding compatible versions.[/red]")
                console.print("[dim]Raise the budget with --max-steps (0 disables it).[/dim]")
        raise typer.Exit(code=1)

    table = Table(title=f"Solution (compiler {repository.compiler_version})", box=box.ROUNDED, show_header=True)
    table.add_column("Package", style="cyan")
    table.add_column("Version")
    table.add_column("Required", style="dim")
    for name, version in result.items():
        required = requirements.get(name)
        table.add_row(escape(name), str(version), str(required) if required else "(transitive)")
    console.print(table)

    if lock is not None:
        try:
            write_lock_file(result, lock)
        except VersolveError as exc:
            console.print(f"[red]{escape(exc.message)}[/red]")
            raise typer.Exit(code=1) from exc
        console.print(f"[green]Wrote {escape(str(lock))}[/green]")
