from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import tomlkit

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[no-redef]


class TomlError(Exception):
    def __init__(self, message: str, lineno: int = 0, colno: int = 0):
        super().__init__(message)
        self.lineno = lineno
        self.colno = colno

    @classmethod
    def from_decode_error(cls, exc: Exception, prefix: str = "") -> TomlError:
        """Build from a tomllib/tomli TOMLDecodeError."""
        return cls(
            message=f"{prefix}{getattr(exc, 'msg', str(exc))}",
            lineno=int(getattr(exc, "lineno", 0)),
            colno=int(getattr(exc, "colno", 0)),
        )


def load_toml_from_content(content: str) -> dict[str, Any]:
    """Load TOML from content string."""
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise TomlError.from_decode_error(exc) from exc


def load_toml_from_path(path: Path) -> dict[str, Any]:
    """Load TOML from file path.

    Args:
        path: Path to the TOML file

    Returns:
        Dictionary loaded from TOML

    Raises:
        TomlError: If TOML parsing fails, with file path included
        OSError: If the file cannot be read
    """
    with open(path, "rb") as file:
        try:
            return tomllib.load(file)
        except tomllib.TOMLDecodeError as exc:
            raise TomlError.from_decode_error(exc, prefix=f"TOML parsing error in file '{path}': ") from exc


def save_toml_to_path(data: dict[str, Any] | tomlkit.TOMLDocument, path: Path) -> None:
    """Save dictionary as TOML to path, preserving formatting and comments.

    Args:
        data: Dictionary or TOMLDocument to save as TOML
        path: Path where the TOML file should be saved
    """
    with open(path, "w", encoding="utf-8") as file:
        tomlkit.dump(data, file)  # type: ignore[arg-type]
