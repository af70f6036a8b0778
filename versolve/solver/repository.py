"""Package records and the read-only repository the solver consults."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from versolve.solver.exceptions import RepositoryError
from versolve.solver.version import Constraint, Version, check_non_negative

logger = logging.getLogger(__name__)


class PackageRecord(BaseModel):
    """One concrete version of a named package.

    ``compiler_constraint`` of None means the record builds with any compiler.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    version: Version
    compiler_constraint: Constraint | None = None
    dependencies: dict[str, Constraint] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def _parse_version(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Version.parse(value)
        return value

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: Version) -> Version:
        return check_non_negative(value)

    def supports_compiler(self, compiler_version: Version) -> bool:
        if self.compiler_constraint is None:
            return True
        return self.compiler_constraint.contains(compiler_version)

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


class Repository(Protocol):
    """Lookup of every known record of a package, for one fixed compiler version."""

    @property
    def compiler_version(self) -> Version: ...

    def records_of(self, name: str) -> Sequence[PackageRecord]: ...


class InMemoryRepository:
    """A ``Repository`` backed by records already resident in memory."""

    def __init__(self, records: Iterable[PackageRecord], compiler_version: Version) -> None:
        self._compiler_version = compiler_version
        self._records_by_name: dict[str, list[PackageRecord]] = {}
        for record in records:
            known = self._records_by_name.setdefault(record.name, [])
            if any(existing.version == record.version for existing in known):
                msg = f"Duplicate package record {record}"
                raise RepositoryError(msg)
            known.append(record)
        logger.debug(
            "Repository holds %d packages for compiler %s",
            len(self._records_by_name),
            compiler_version,
        )

    @property
    def compiler_version(self) -> Version:
        return self._compiler_version

    @property
    def package_names(self) -> list[str]:
        return sorted(self._records_by_name)

    def records_of(self, name: str) -> Sequence[PackageRecord]:
        return tuple(self._records_by_name.get(name, ()))
