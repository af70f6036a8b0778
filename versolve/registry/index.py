"""Registry index loading.

A registry index is a local TOML file listing every known package record::

    compiler = "0.19.1"

    [[package]]
    name = "B"
    version = "1.0.0"
    compiler = "0.19.0 <= v < 0.20.0"

    [package.dependencies]
    C = "1.0.0 <= v < 2.0.0"
"""

import logging
from pathlib import Path
from typing import Any, cast

from pydantic import ValidationError

from versolve._utils.toml_utils import TomlError, load_toml_from_content, load_toml_from_path
from versolve.solver.exceptions import RegistryError, RepositoryError, VersionParseError
from versolve.solver.repository import InMemoryRepository, PackageRecord
from versolve.solver.version import Version

logger = logging.getLogger(__name__)

_KNOWN_RECORD_KEYS = {"name", "version", "compiler", "dependencies"}


def _parse_record(index: int, entry: Any) -> PackageRecord:
    if not isinstance(entry, dict):
        msg = f"Registry entry #{index} must be a table, got {type(entry).__name__}"
        raise RegistryError(msg)
    entry_dict = cast("dict[str, Any]", entry)

    unknown_keys = set(entry_dict) - _KNOWN_RECORD_KEYS
    if unknown_keys:
        msg = f"Unknown keys in registry entry #{index}: {', '.join(sorted(unknown_keys))}"
        raise RegistryError(msg)

    try:
        return PackageRecord(
            name=entry_dict.get("name"),
            version=entry_dict.get("version"),
            compiler_constraint=entry_dict.get("compiler"),
            dependencies=entry_dict.get("dependencies", {}),
        )
    except ValidationError as exc:
        label = entry_dict.get("name", f"#{index}")
        msg = f"Invalid registry entry '{label}': {exc}"
        raise RegistryError(msg) from exc


def parse_registry(
    raw: dict[str, Any],
    compiler_version: Version | None = None,
    default_compiler_version: Version | None = None,
) -> InMemoryRepository:
    """Build a repository from an already-decoded registry index.

    Args:
        raw: The decoded TOML document.
        compiler_version: Overrides the index's ``compiler`` key when given.
        default_compiler_version: Used when the index has no ``compiler`` key.

    Returns:
        The in-memory repository.

    Raises:
        RegistryError: If the document is malformed or names no compiler version.
    """
    compiler_text = raw.get("compiler")
    if compiler_version is None and compiler_text is None:
        compiler_version = default_compiler_version
    if compiler_version is None:
        if not isinstance(compiler_text, str):
            msg = "Registry index declares no valid 'compiler' version and none was given"
            raise RegistryError(msg)
        try:
            compiler_version = Version.parse(compiler_text)
        except VersionParseError as exc:
            msg = f"Invalid registry compiler version: {exc.message}"
            raise RegistryError(msg) from exc

    entries = raw.get("package", [])
    if not isinstance(entries, list):
        msg = f"'package' must be an array of tables, got {type(entries).__name__}"
        raise RegistryError(msg)

    records = [_parse_record(index, entry) for index, entry in enumerate(cast("list[Any]", entries))]
    try:
        return InMemoryRepository(records, compiler_version=compiler_version)
    except RepositoryError as exc:
        raise RegistryError(exc.message) from exc


def parse_registry_content(
    content: str,
    compiler_version: Version | None = None,
    default_compiler_version: Version | None = None,
) -> InMemoryRepository:
    try:
        raw = load_toml_from_content(content)
    except TomlError as exc:
        msg = f"Invalid TOML syntax in registry index: {exc}"
        raise RegistryError(msg) from exc
    return parse_registry(raw, compiler_version, default_compiler_version)


def load_registry(
    path: Path,
    compiler_version: Version | None = None,
    default_compiler_version: Version | None = None,
) -> InMemoryRepository:
    """Load a registry index file into an in-memory repository.

    Raises:
        RegistryError: If the file cannot be read or is invalid.
    """
    try:
        raw = load_toml_from_path(path)
    except TomlError as exc:
        raise RegistryError(str(exc)) from exc
    except OSError as exc:
        msg = f"Could not read registry index '{path}': {exc}"
        raise RegistryError(msg) from exc

    repository = parse_registry(raw, compiler_version, default_compiler_version)
    logger.debug("Loaded registry index '%s'", path)
    return repository
