"""Project manifest loading: the initial version ranges handed to the solver.

A manifest lists required ranges per package name::

    [dependencies]
    C = "1.0.0 <= v < 2.0.0"

    [test-dependencies]
    B = "1.0.0 <= v < 1.0.4"
"""

import logging
from pathlib import Path
from typing import Any, cast

from versolve._utils.toml_utils import TomlError, load_toml_from_content, load_toml_from_path
from versolve.solver.exceptions import ConstraintParseError, ManifestError
from versolve.solver.version import Constraint

logger = logging.getLogger(__name__)

DEPENDENCIES_KEY = "dependencies"
TEST_DEPENDENCIES_KEY = "test-dependencies"


def _parse_section(raw: dict[str, Any], key: str) -> dict[str, Constraint]:
    section = raw.get(key, {})
    if not isinstance(section, dict):
        msg = f"[{key}] must be a table, got {type(section).__name__}"
        raise ManifestError(msg)

    constraints: dict[str, Constraint] = {}
    for name, text in cast("dict[str, Any]", section).items():
        if not isinstance(text, str):
            msg = f"Invalid range for '{name}' in [{key}]: expected a string like '1.0.0 <= v < 2.0.0'"
            raise ManifestError(msg)
        try:
            constraints[str(name)] = Constraint.parse(text)
        except ConstraintParseError as exc:
            msg = f"Invalid range for '{name}' in [{key}]: {exc.message}"
            raise ManifestError(msg) from exc
    return constraints


def parse_requirements(raw: dict[str, Any], include_test: bool = True) -> dict[str, Constraint]:
    """Collect the required ranges of a decoded manifest.

    A name listed in both sections is required to satisfy both ranges.

    Args:
        raw: The decoded TOML document.
        include_test: Whether ``[test-dependencies]`` take part.

    Returns:
        Required range per package name.

    Raises:
        ManifestError: If a section is malformed or the two sections conflict.
    """
    requirements = _parse_section(raw, DEPENDENCIES_KEY)
    if not include_test:
        return requirements

    for name, constraint in _parse_section(raw, TEST_DEPENDENCIES_KEY).items():
        existing = requirements.get(name)
        if existing is None:
            requirements[name] = constraint
            continue
        narrowed = existing.intersect(constraint)
        if narrowed is None:
            msg = f"'{name}' is required as {existing} and as {constraint} for tests; the ranges do not overlap"
            raise ManifestError(msg)
        requirements[name] = narrowed
    return requirements


def parse_requirements_content(content: str, include_test: bool = True) -> dict[str, Constraint]:
    try:
        raw = load_toml_from_content(content)
    except TomlError as exc:
        msg = f"Invalid TOML syntax in manifest: {exc}"
        raise ManifestError(msg) from exc
    return parse_requirements(raw, include_test)


def load_requirements(path: Path, include_test: bool = True) -> dict[str, Constraint]:
    """Load the required ranges from a manifest file.

    Raises:
        ManifestError: If the file cannot be read or is invalid.
    """
    try:
        raw = load_toml_from_path(path)
    except TomlError as exc:
        raise ManifestError(str(exc)) from exc
    except OSError as exc:
        msg = f"Could not read manifest '{path}': {exc}"
        raise ManifestError(msg) from exc

    requirements = parse_requirements(raw, include_test)
    logger.debug("Manifest '%s' requires %d packages", path, len(requirements))
    return requirements
