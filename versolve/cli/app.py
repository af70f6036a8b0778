"""versolve CLI.

Provides commands for solving package version requirements against a local
registry index, inspecting the index, and managing solver settings.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from versolve.cli.commands.config_cmd import do_config_get, do_config_list, do_config_set
from versolve.cli.commands.solve_cmd import do_solve
from versolve.cli.commands.versions_cmd import do_versions

app = typer.Typer(
    name="versolve",
    no_args_is_help=True,
    help="versolve: pick the newest mutually compatible package versions.",
)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log solver decisions to stderr"),
    ] = False,
) -> None:
    """Configure logging for every command."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ── Config subcommand group ──────────────────────────────────────────
config_app = typer.Typer(
    name="config",
    no_args_is_help=True,
    help="Manage solver settings.",
)
app.add_typer(config_app, name="config")


@config_app.command("set", help="Set a configuration value")
def config_set_cmd(
    key: Annotated[
        str,
        typer.Argument(help="Configuration key (e.g. 'compiler-version', 'max-steps')"),
    ],
    value: Annotated[
        str,
        typer.Argument(help="Value to set"),
    ],
) -> None:
    """Set a setting value."""
    do_config_set(key=key, value=value)


@config_app.command("get", help="Get a configuration value")
def config_get_cmd(
    key: Annotated[
        str,
        typer.Argument(help="Configuration key (e.g. 'compiler-version', 'max-steps')"),
    ],
) -> None:
    """Get a setting value and its source."""
    do_config_get(key=key)


@config_app.command("list", help="List all configuration values")
def config_list_cmd() -> None:
    """List all setting values with their sources."""
    do_config_list()


# ── Top-level commands ───────────────────────────────────────────────


@app.command("solve", help="Solve a manifest's version requirements against a registry index")
def solve_cmd(
    manifest: Annotated[
        Path,
        typer.Argument(help="Project manifest with [dependencies] and [test-dependencies] tables"),
    ],
    registry: Annotated[
        Path,
        typer.Option("--registry", "-r", help="Registry index TOML file"),
    ],
    compiler: Annotated[
        str | None,
        typer.Option("--compiler", "-c", help="Compiler version to solve for (e.g. '0.19.1')"),
    ] = None,
    max_steps: Annotated[
        int | None,
        typer.Option("--max-steps", help="Search budget in visited states (0 disables it)", min=0),
    ] = None,
    no_test: Annotated[
        bool,
        typer.Option("--no-test", help="Ignore [test-dependencies]"),
    ] = False,
    lock: Annotated[
        Path | None,
        typer.Option("--lock", "-l", help="Write the solution to this lock file"),
    ] = None,
) -> None:
    """Solve version requirements and print the chosen versions."""
    do_solve(manifest=manifest, registry=registry, compiler=compiler, max_steps=max_steps, include_test=not no_test, lock=lock)


@app.command("versions", help="List the known versions of a package")
def versions_cmd(
    name: Annotated[
        str,
        typer.Argument(help="Package name"),
    ],
    registry: Annotated[
        Path,
        typer.Option("--registry", "-r", help="Registry index TOML file"),
    ],
) -> None:
    """List versions of a package, newest first."""
    do_versions(name=name, registry=registry)
