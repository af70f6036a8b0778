"""Lock file TOML I/O.

The lock file records the exact version chosen for every solved package, one
``name = "X.Y.Z"`` pair per line, sorted by name for clean VCS diffs.
"""

from pathlib import Path

import tomlkit

from versolve._utils.toml_utils import TomlError, load_toml_from_content, save_toml_to_path
from versolve.solver.exceptions import LockFileError, VersionParseError
from versolve.solver.version import Version


def parse_lock_file(content: str) -> dict[str, Version]:
    """Parse a lock file TOML string.

    Raises:
        LockFileError: If parsing or validation fails.
    """
    if not content.strip():
        return {}

    try:
        raw = load_toml_from_content(content)
    except TomlError as exc:
        msg = f"Invalid TOML syntax in lock file: {exc}"
        raise LockFileError(msg) from exc

    locked: dict[str, Version] = {}
    for name, value in raw.items():
        if not isinstance(value, str):
            msg = f"Lock file entry for '{name}' must be a version string, got {type(value).__name__}"
            raise LockFileError(msg)
        try:
            locked[str(name)] = Version.parse(value)
        except VersionParseError as exc:
            msg = f"Invalid lock file entry for '{name}': {exc.message}"
            raise LockFileError(msg) from exc
    return locked


def _lock_document(solution: dict[str, Version]) -> tomlkit.TOMLDocument:
    doc = tomlkit.document()
    for name in sorted(solution):
        doc.add(name, str(solution[name]))
    return doc


def serialize_lock_file(solution: dict[str, Version]) -> str:
    return tomlkit.dumps(_lock_document(solution))


def write_lock_file(solution: dict[str, Version], path: Path) -> None:
    """Write ``solution`` to ``path``.

    Raises:
        LockFileError: If the file cannot be written.
    """
    try:
        save_toml_to_path(_lock_document(solution), path)
    except OSError as exc:
        msg = f"Could not write lock file '{path}': {exc}"
        raise LockFileError(msg) from exc
