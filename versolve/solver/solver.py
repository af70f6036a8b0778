"""Backtracking version solver.

Given the version ranges required for a set of package names and a
``Repository`` of available records, find one version per transitively
required name that satisfies every contributed range and every chosen
record's compiler constraint.

The search is depth-first with forward checking:

1. the pending name that sorts first is picked, so identical inputs always
   explore identical trees;
2. its records inside the accumulated range are tried newest first;
3. each candidate's dependency ranges are intersected into the pending map,
   and an empty intersection rejects the candidate on the spot;
4. the first complete assignment wins, which makes it the newest one
   reachable in this search order.

Every step builds new ``pending`` and ``solutions`` dicts, so abandoning a
branch never disturbs its siblings. Instead of Python recursion the search
keeps an explicit stack of candidate generators, one per open pick.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from enum import unique

from pydantic import BaseModel, ConfigDict

from versolve._compat import StrEnum
from versolve.solver.repository import PackageRecord, Repository
from versolve.solver.version import Constraint, Version

logger = logging.getLogger(__name__)

_SearchState = tuple[dict[str, Constraint], dict[str, Version]]


@unique
class NoSolutionReason(StrEnum):
    UNSATISFIABLE = "unsatisfiable"
    STEP_LIMIT = "step_limit"


class NoSolution(BaseModel):
    """Outcome of a solve that found no assignment.

    ``STEP_LIMIT`` means the search was cut short by ``max_steps`` and an
    assignment may still exist.
    """

    model_config = ConfigDict(frozen=True)

    reason: NoSolutionReason
    steps: int


def merge_constraints(
    pending: Mapping[str, Constraint],
    dependencies: Mapping[str, Constraint],
) -> dict[str, Constraint] | None:
    """Intersect ``dependencies`` into ``pending``, name by name.

    Returns:
        A new mapping, or None if any name ends up with an empty range.
    """
    merged = dict(pending)
    for name, constraint in dependencies.items():
        existing = merged.get(name)
        if existing is None:
            merged[name] = constraint
            continue
        narrowed = existing.intersect(constraint)
        if narrowed is None:
            logger.debug("Ranges for '%s' are disjoint: %s and %s", name, existing, constraint)
            return None
        merged[name] = narrowed
    return merged


class Solver:
    def __init__(self, repository: Repository, max_steps: int | None = None) -> None:
        if max_steps is not None and max_steps < 1:
            msg = f"max_steps must be a positive integer or None, got {max_steps}"
            raise ValueError(msg)
        self._repository = repository
        self._max_steps = max_steps
        self._steps = 0

    @property
    def steps(self) -> int:
        """Search states visited by the last ``solve`` call."""
        return self._steps

    def solve(self, constraints: Mapping[str, Constraint]) -> dict[str, Version] | NoSolution:
        self._steps = 0
        frames: list[Iterator[_SearchState]] = [iter([(dict(constraints), {})])]

        while frames:
            try:
                pending, solutions = next(frames[-1])
            except StopIteration:
                frames.pop()
                continue

            self._steps += 1
            if self._max_steps is not None and self._steps > self._max_steps:
                logger.debug("Giving up after %d steps", self._max_steps)
                return NoSolution(reason=NoSolutionReason.STEP_LIMIT, steps=self._max_steps)

            if not pending:
                logger.debug("Solved %d packages in %d steps", len(solutions), self._steps)
                return dict(sorted(solutions.items()))

            frames.append(self._expand(pending, solutions))

        logger.debug("No solution after %d steps", self._steps)
        return NoSolution(reason=NoSolutionReason.UNSATISFIABLE, steps=self._steps)

    def _expand(self, pending: dict[str, Constraint], solutions: dict[str, Version]) -> Iterator[_SearchState]:
        """Yield the child states of one pick, in trial order."""
        name = min(pending)
        constraint = pending[name]
        rest = {key: value for key, value in pending.items() if key != name}

        # A committed name re-contributed by a later record only needs its range checked.
        committed = solutions.get(name)
        if committed is not None:
            if constraint.contains(committed):
                yield rest, solutions
            else:
                logger.debug("'%s' is committed to %s, outside %s", name, committed, constraint)
            return

        compiler_version = self._repository.compiler_version
        for record in self._candidates(name, constraint):
            if not record.supports_compiler(compiler_version):
                logger.debug("Rejecting %s: compiler %s outside %s", record, compiler_version, record.compiler_constraint)
                continue
            merged = merge_constraints(rest, record.dependencies)
            if merged is None:
                logger.debug("Rejecting %s: dependency ranges conflict", record)
                continue
            yield merged, {**solutions, name: record.version}
            logger.debug("Backtracking from %s", record)

    def _candidates(self, name: str, constraint: Constraint) -> list[PackageRecord]:
        """Records of ``name`` inside ``constraint``, newest first.

        This ordering is the whole preference policy of the solver.
        """
        candidates = sorted(
            (record for record in self._repository.records_of(name) if constraint.contains(record.version)),
            key=lambda record: record.version,
            reverse=True,
        )
        logger.debug("'%s' has candidates %s", name, [str(record.version) for record in candidates])
        return candidates


def solve(
    initial_constraints: Mapping[str, Constraint],
    repository: Repository,
    max_steps: int | None = None,
) -> dict[str, Version] | NoSolution:
    """Assign one version to every transitively required package.

    Args:
        initial_constraints: Required range per package name.
        repository: Available records and the compiler version to solve for.
        max_steps: Optional bound on visited search states.

    Returns:
        The assignment, in ascending name order, or ``NoSolution``.
    """
    return Solver(repository, max_steps=max_steps).solve(initial_constraints)
