# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false
"""Version numbers and half-open version ranges.

Parsing of the dotted version form delegates to ``semantic_version``. Only plain
``major.minor.patch`` versions are accepted; pre-release and build suffixes
are rejected.

Constraints use the range form found in package manifests::

    1.0.0 <= v < 2.0.0

Both bounds may use ``<`` or ``<=``. Since versions are integer triples, every
such range normalizes exactly onto a half-open ``[low, high)`` interval.
"""

from __future__ import annotations

from typing import Any, NamedTuple

import semantic_version  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from versolve.solver.exceptions import ConstraintParseError, VersionParseError

_LESS_THAN = "<"
_LESS_THAN_OR_EQUAL = "<="


class Version(NamedTuple):
    """A ``major.minor.patch`` version, ordered lexicographically."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a dotted version string.

        Strips a leading 'v' prefix if present (common in git tags like v1.2.3).

        Args:
            text: The version string to parse (e.g. "1.2.3" or "v1.2.3").

        Returns:
            The parsed Version.

        Raises:
            VersionParseError: If the string is not a valid version.
        """
        cleaned = text.strip().removeprefix("v")
        try:
            parsed = semantic_version.Version(cleaned)
        except ValueError as exc:
            msg = f"Invalid version: {text!r}"
            raise VersionParseError(msg) from exc
        if parsed.prerelease or parsed.build:
            msg = f"Invalid version: {text!r} (pre-release and build suffixes are not supported)"
            raise VersionParseError(msg)
        return cls(int(parsed.major), int(parsed.minor), int(parsed.patch))

    def next_patch(self) -> Version:
        """Return the smallest version strictly greater than this one."""
        return Version(self.major, self.minor, self.patch + 1)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def check_non_negative(version: Version) -> Version:
    """Validator body shared by models holding a ``Version``."""
    if min(version) < 0:
        msg = f"Version components must be non-negative, got {version}"
        raise ValueError(msg)
    return version


def _parse_op(text: str, source: str) -> str:
    if text not in (_LESS_THAN, _LESS_THAN_OR_EQUAL):
        msg = f"Expected '<' or '<=', got {text!r} in constraint {source!r}"
        raise ConstraintParseError(msg)
    return text


def _parse_bound(text: str, source: str) -> Version:
    try:
        return Version.parse(text)
    except VersionParseError as exc:
        msg = f"Invalid version bound {text!r} in constraint {source!r}"
        raise ConstraintParseError(msg) from exc


class Constraint(BaseModel):
    """A non-empty half-open version range ``[low, high)``."""

    model_config = ConfigDict(frozen=True)

    low: Version
    high: Version

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, data: Any) -> Any:
        if isinstance(data, str):
            low, high = _bounds_from_text(data)
            return {"low": low, "high": high}
        return data

    @field_validator("low", "high", mode="before")
    @classmethod
    def _parse_version_field(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Version.parse(value)
        return value

    @field_validator("low", "high")
    @classmethod
    def _check_bound(cls, value: Version) -> Version:
        return check_non_negative(value)

    @model_validator(mode="after")
    def _check_non_empty(self) -> Constraint:
        if self.low >= self.high:
            msg = f"Empty version range: {self.low} <= v < {self.high}"
            raise ValueError(msg)
        return self

    @classmethod
    def parse(cls, text: str) -> Constraint:
        """Parse a range such as ``"1.0.0 <= v < 2.0.0"``.

        Raises:
            ConstraintParseError: If the text is malformed or the range is empty.
        """
        low, high = _bounds_from_text(text)
        return cls(low=low, high=high)

    @classmethod
    def exactly(cls, version: Version) -> Constraint:
        """The range holding only ``version``."""
        return cls(low=version, high=version.next_patch())

    def contains(self, version: Version) -> bool:
        return self.low <= version < self.high

    def __contains__(self, version: object) -> bool:
        return isinstance(version, Version) and self.contains(version)

    def intersect(self, other: Constraint) -> Constraint | None:
        """Return the overlap with ``other``, or None when the ranges are disjoint."""
        low = max(self.low, other.low)
        high = min(self.high, other.high)
        if low >= high:
            return None
        return Constraint(low=low, high=high)

    def __str__(self) -> str:
        return f"{self.low} <= v < {self.high}"


def _bounds_from_text(text: str) -> tuple[Version, Version]:
    parts = text.split()
    if len(parts) != 5 or parts[2] != "v":
        msg = f"Expected something like '1.0.0 <= v < 2.0.0', got {text!r}"
        raise ConstraintParseError(msg)
    low = _parse_bound(parts[0], text)
    low_op = _parse_op(parts[1], text)
    high_op = _parse_op(parts[3], text)
    high = _parse_bound(parts[4], text)

    if low_op == _LESS_THAN:
        low = low.next_patch()
    if high_op == _LESS_THAN_OR_EQUAL:
        high = high.next_patch()
    if low >= high:
        msg = f"Constraint {text!r} admits no version"
        raise ConstraintParseError(msg)
    return low, high
