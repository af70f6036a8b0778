"""Solver settings for the versolve CLI.

Reads and writes ``~/.versolve/settings`` using a dotenv-style format
(``KEY=VALUE``, ``#`` comments, blank lines allowed).

Resolution order: environment variables > settings file > defaults.
"""

from __future__ import annotations

import os
from enum import unique
from pathlib import Path
from typing import Annotated, NamedTuple, cast

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from versolve._compat import StrEnum
from versolve.solver.exceptions import SettingsError, VersionParseError
from versolve.solver.version import Version, check_non_negative

# ── Types ───────────────────────────────────────────────────────────


@unique
class SettingSource(StrEnum):
    ENV = "env"
    FILE = "file"
    DEFAULT = "default"


class SettingEntry(NamedTuple):
    key: str
    cli_key: str
    value: str
    source: SettingSource


class SolverSettings(BaseModel):
    """Effective settings for one solve."""

    model_config = ConfigDict(frozen=True)

    compiler_version: Version
    max_steps: int | None = Field(default=None, ge=1)

    @field_validator("compiler_version", mode="before")
    @classmethod
    def _parse_compiler_version(cls, value: object) -> object:
        if isinstance(value, str):
            return Version.parse(value)
        return value

    @field_validator("compiler_version")
    @classmethod
    def _check_compiler_version(cls, value: Version) -> Version:
        return check_non_negative(value)


# ── Paths ───────────────────────────────────────────────────────────

CONFIG_DIR = Path.home() / ".versolve"
SETTINGS_PATH = CONFIG_DIR / "settings"

# ── Setting keys ────────────────────────────────────────────────────

# Map from internal key to setting key (env var name and file key share the same names)
_SETTING_KEYS: dict[str, str] = {
    "compiler_version": "VERSOLVE_COMPILER_VERSION",
    "max_steps": "VERSOLVE_MAX_STEPS",
}

_DEFAULTS: dict[str, str] = {
    "compiler_version": "0.19.1",
    "max_steps": "100000",  # 0 means unlimited
}

# Map from CLI flag names (kebab-case) to internal keys
_KEY_ALIASES: dict[str, str] = {
    "compiler-version": "compiler_version",
    "max-steps": "max_steps",
}

VALID_KEYS: list[str] = list(_KEY_ALIASES.keys())

_STEP_COUNT: TypeAdapter[int] = TypeAdapter(Annotated[int, Field(ge=0)])


def resolve_key(cli_key: str) -> str | None:
    """Resolve a CLI flag name to an internal setting key."""
    return _KEY_ALIASES.get(cli_key)


# ── Dotenv parser / serializer ─────────────────────────────────────


def _parse_dotenv(content: str) -> dict[str, str]:
    """Parse a dotenv-style string into a dict."""
    result: dict[str, str] = {}
    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        eq_index = trimmed.find("=")
        if eq_index == -1:
            continue
        key = trimmed[:eq_index].strip()
        value = trimmed[eq_index + 1 :].strip()
        result[key] = value
    return result


def _serialize_dotenv(entries: dict[str, str]) -> str:
    lines = [f"{key}={value}" for key, value in entries.items()]
    return "\n".join(lines) + "\n"


# ── File I/O ───────────────────────────────────────────────────────


def _read_settings_file() -> dict[str, str]:
    if not SETTINGS_PATH.is_file():
        return {}
    try:
        return _parse_dotenv(SETTINGS_PATH.read_text(encoding="utf-8"))
    except OSError:
        return {}


def _write_settings_file(entries: dict[str, str]) -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(_serialize_dotenv(entries), encoding="utf-8")


# ── Public API ─────────────────────────────────────────────────────


def _cli_key_for(internal_key: str) -> str:
    """Reverse-lookup the CLI flag name for an internal key."""
    return next(cli_k for cli_k, int_k in _KEY_ALIASES.items() if int_k == internal_key)


def get_setting_value(key: str) -> SettingEntry:
    """Get a single setting value with its source.

    Args:
        key: Internal key (e.g. "compiler_version", "max_steps").

    Returns:
        A SettingEntry with the raw value and its source.
    """
    cli_key = _cli_key_for(key)

    env_name = _SETTING_KEYS[key]
    env_val = os.environ.get(env_name)
    if env_val is not None:
        return SettingEntry(key=key, cli_key=cli_key, value=env_val, source=SettingSource.ENV)

    file_entries = _read_settings_file()
    if env_name in file_entries:
        return SettingEntry(key=key, cli_key=cli_key, value=file_entries[env_name], source=SettingSource.FILE)

    return SettingEntry(key=key, cli_key=cli_key, value=_DEFAULTS[key], source=SettingSource.DEFAULT)


def set_setting_value(key: str, value: str) -> None:
    """Set a setting value in the settings file.

    Args:
        key: Internal key (e.g. "compiler_version", "max_steps").
        value: The raw value to store.

    Raises:
        SettingsError: If the value is not valid for the key; nothing is written.
    """
    _parse_setting(key, value)
    file_entries = _read_settings_file()
    file_entries[_SETTING_KEYS[key]] = value
    _write_settings_file(file_entries)


def list_settings() -> list[SettingEntry]:
    """List all setting values with their sources."""
    return [get_setting_value(internal_key) for internal_key in _KEY_ALIASES.values()]


# ── Typed access ───────────────────────────────────────────────────


def _parse_setting(key: str, value: str) -> Version | int | None:
    """Validate a raw setting; a max-steps of 0 becomes None."""
    if key == "compiler_version":
        try:
            return Version.parse(value)
        except VersionParseError as exc:
            msg = f"Invalid {_cli_key_for(key)} value {value!r}: {exc.message}"
            raise SettingsError(msg) from exc

    try:
        return _STEP_COUNT.validate_python(value) or None
    except ValidationError as exc:
        msg = f"Invalid {_cli_key_for(key)} value {value!r}: {exc.errors()[0]['msg']}"
        raise SettingsError(msg) from exc


def load_compiler_version() -> Version:
    """Resolve the default compiler version.

    Raises:
        SettingsError: If the configured value is not a version.
    """
    entry = get_setting_value("compiler_version")
    return cast(Version, _parse_setting(entry.key, entry.value))


def load_max_steps() -> int | None:
    """Resolve the search budget; None means unlimited.

    Raises:
        SettingsError: If the configured value is not a non-negative integer.
    """
    entry = get_setting_value("max_steps")
    return cast("int | None", _parse_setting(entry.key, entry.value))


def load_settings() -> SolverSettings:
    """Load the effective solver settings.

    Raises:
        SettingsError: If a configured value is not a valid version or step count.
    """
    return SolverSettings(compiler_version=load_compiler_version(), max_steps=load_max_steps())
