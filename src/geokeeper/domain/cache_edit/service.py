"""Cache edit use case: read snapshot, validate, commit atomically."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from geokeeper.domain.cache_edit.dto import CacheEditResult
from geokeeper.domain.errors import NotFound
from geokeeper.domain.model import CacheAttribute, CacheSnapshot
from geokeeper.domain.transaction import StagedWrite, TransactionOutcome

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from geokeeper.domain.cache_edit.descriptions import DescriptionManager
    from geokeeper.domain.cache_edit.dto import AttributeDelta, CacheEditPlan, FieldChanges
    from geokeeper.domain.cache_edit.validator import CacheEditValidator
    from geokeeper.domain.policy import BranchPolicy
    from geokeeper.domain.ports.services import Localizer
    from geokeeper.domain.ports.unit_of_work import GeokeeperRepositories, GeokeeperUnitOfWork
    from geokeeper.domain.transaction import TransactionCoordinator

log = logging.getLogger(__name__)


def load_cache_snapshot(repositories: GeokeeperRepositories, cache_code: str) -> CacheSnapshot:
    cache = repositories.caches.get_by_code(cache_code)
    if cache is None:
        raise NotFound(f"Cache '{cache_code}' does not exist")
    return CacheSnapshot.from_entity(
        cache,
        attribute_codes=repositories.attributes.codes_for(cache.id),
        description_languages=repositories.descriptions.languages(cache.id),
    )


class CacheEditService:
    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], GeokeeperUnitOfWork],
        coordinator: TransactionCoordinator,
        validator: CacheEditValidator,
        descriptions: DescriptionManager,
        policy: BranchPolicy,
        localizer: Localizer,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._coordinator = coordinator
        self._validator = validator
        self._descriptions = descriptions
        self._policy = policy
        self._localizer = localizer
        self._clock = clock or (lambda: datetime.now(UTC))

    def edit(
        self,
        cache_code: str,
        actor_id: UUID,
        changes: FieldChanges,
        *,
        langprefs: Sequence[str] = ("en",),
    ) -> CacheEditResult:
        plan = self.prepare(cache_code, actor_id, changes, langprefs=langprefs)
        self.commit(plan)
        return CacheEditResult(applied=not plan.problems, problems=plan.problems.as_dict())

    def prepare(
        self,
        cache_code: str,
        actor_id: UUID,
        changes: FieldChanges,
        *,
        langprefs: Sequence[str] = ("en",),
    ) -> CacheEditPlan:
        with self._unit_of_work_factory() as uow:
            snapshot = load_cache_snapshot(uow.repositories, cache_code)

        def translate(message: str) -> str:
            return self._localizer.translate(message, langprefs)

        return self._validator.validate(
            snapshot, actor_id, changes, langprefs=langprefs, translate=translate
        )

    def commit(self, plan: CacheEditPlan) -> TransactionOutcome:
        if plan.problems or not plan.has_changes:
            return TransactionOutcome()

        cache_id = plan.cache.id
        writes: list[StagedWrite] = []
        if plan.description is not None:
            writes.extend(self._descriptions.staged_writes(cache_id, plan.description))
        if plan.attributes is not None and not plan.attributes.is_empty:
            delta = plan.attributes
            writes.append(
                StagedWrite(
                    name="attributes",
                    apply=lambda repos: self._apply_attributes(repos, cache_id, delta),
                )
            )
        if plan.staged or self._policy.sets_last_modified_explicitly:
            staged = dict(plan.staged)
            writes.append(
                StagedWrite(
                    name="cache_fields",
                    apply=lambda repos: self._apply_fields(repos, cache_id, staged),
                )
            )

        outcome = self._coordinator.run(writes, problems=plan.problems)
        log.info(
            "Cache %s edited: applied=%s skipped=%s",
            plan.cache.code,
            outcome.applied,
            outcome.skipped,
        )
        return outcome

    def _apply_attributes(
        self, repositories: GeokeeperRepositories, cache_id: UUID, delta: AttributeDelta
    ) -> None:
        present = repositories.attributes.codes_for(cache_id)
        for acode in sorted(delta.to_add - present):
            repositories.attributes.add(CacheAttribute(cache_id=cache_id, acode=acode))
        for acode in sorted(delta.to_remove & present):
            repositories.attributes.remove(cache_id, acode)

    def _apply_fields(
        self, repositories: GeokeeperRepositories, cache_id: UUID, staged: dict[str, object]
    ) -> None:
        cache = repositories.caches.get(cache_id)
        if cache is None:
            raise NotFound(f"Cache {cache_id} does not exist")
        for name, value in staged.items():
            setattr(cache, name, value)
        if self._policy.sets_last_modified_explicitly:
            cache.last_modified = self._clock()
