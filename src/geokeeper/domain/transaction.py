"""Atomic apply phase with optimistic in-transaction rechecks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from geokeeper.domain.ports.unit_of_work import GeokeeperRepositories, GeokeeperUnitOfWork
    from geokeeper.domain.problems import ProblemMap

log = logging.getLogger(__name__)

type WriteStep = Callable[[GeokeeperRepositories], None]
type Precondition = Callable[[GeokeeperRepositories], bool]


@dataclass(frozen=True, slots=True)
class StagedWrite:
    """One write of the apply phase.

    ``precondition`` is evaluated inside the open unit of work right before
    ``apply``; when it no longer holds the write is skipped as an already
    processed (duplicate) submission. ``requires`` names earlier steps that
    must have been applied for this one to run.
    """

    name: str
    apply: WriteStep
    precondition: Precondition | None = None
    requires: tuple[str, ...] = ()


@dataclass(slots=True)
class TransactionOutcome:
    committed: bool = False
    applied: list[str] = field(default_factory=list[str])
    skipped: list[str] = field(default_factory=list[str])

    @property
    def duplicate(self) -> bool:
        return bool(self.skipped) and not self.applied


class TransactionCoordinator:
    """Runs staged writes in a single unit of work, all or nothing."""

    def __init__(self, unit_of_work_factory: Callable[[], GeokeeperUnitOfWork]) -> None:
        self._unit_of_work_factory = unit_of_work_factory

    def run(
        self,
        writes: Sequence[StagedWrite],
        *,
        problems: ProblemMap | None = None,
    ) -> TransactionOutcome:
        outcome = TransactionOutcome()
        if problems:
            log.debug("Not opening a transaction: %d field(s) have problems", len(problems))
            return outcome
        if not writes:
            return outcome

        with self._unit_of_work_factory() as uow:
            repositories = uow.repositories
            for write in writes:
                if any(name in outcome.skipped for name in write.requires):
                    outcome.skipped.append(write.name)
                    continue
                if write.precondition is not None and not write.precondition(repositories):
                    log.info("Skipping %s: already applied by a duplicate submission", write.name)
                    outcome.skipped.append(write.name)
                    continue
                write.apply(repositories)
                outcome.applied.append(write.name)
            uow.commit()
        outcome.committed = True
        return outcome
