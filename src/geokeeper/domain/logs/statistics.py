"""Derived statistics kept consistent with the log history.

Counters are updated incrementally from (old type -> new type) transitions.
``replay_cache_statistics`` recomputes them from scratch and backs the
consistency check.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from geokeeper.domain.errors import ConsistencyFault
from geokeeper.domain.logs.dto import CacheStatistics
from geokeeper.domain.model import (
    AVAILABILITY_LOG_TYPES,
    FOUND_LOG_TYPES,
    NOT_FOUND_LOG_TYPES,
    LogType,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from geokeeper.domain.logs.dto import LogTransition
    from geokeeper.domain.model import Geocache, LogEntry
    from geokeeper.domain.policy import BranchPolicy
    from geokeeper.domain.ports.services import AssetInvalidator
    from geokeeper.domain.ports.unit_of_work import GeokeeperRepositories

log = logging.getLogger(__name__)

type CounterDelta = tuple[int, int, int]

# Only these types count towards a user's own counters.
USER_COUNTED_TYPES: Final[dict[LogType, int]] = {
    LogType.FOUND_IT: 0,
    LogType.DIDNT_FIND_IT: 1,
    LogType.COMMENT: 2,
}


def _cache_slot(logtype: LogType | None) -> int | None:
    if logtype in FOUND_LOG_TYPES:
        return 0
    if logtype in NOT_FOUND_LOG_TYPES:
        return 1
    if logtype is LogType.COMMENT:
        return 2
    return None


def _delta(old_slot: int | None, new_slot: int | None) -> CounterDelta:
    counts = [0, 0, 0]
    if old_slot is not None:
        counts[old_slot] -= 1
    if new_slot is not None:
        counts[new_slot] += 1
    return counts[0], counts[1], counts[2]


def cache_counter_delta(old_type: LogType | None, new_type: LogType | None) -> CounterDelta:
    """(found, not found, comment) delta for a cache."""
    return _delta(_cache_slot(old_type), _cache_slot(new_type))


def user_counter_delta(old_type: LogType | None, new_type: LogType | None) -> CounterDelta:
    """(found, not found, comment) delta for the log's author."""
    return _delta(
        USER_COUNTED_TYPES.get(old_type) if old_type is not None else None,
        USER_COUNTED_TYPES.get(new_type) if new_type is not None else None,
    )


def replay_cache_statistics(
    logs: Iterable[LogEntry],
    policy: BranchPolicy,
) -> CacheStatistics:
    founds = notfounds = notes = 0
    last_found: datetime | None = None
    for entry in logs:
        if not policy.is_active_log(entry):
            continue
        slot = _cache_slot(entry.type)
        if slot == 0:
            founds += 1
            if last_found is None or entry.date > last_found:
                last_found = entry.date
        elif slot == 1:
            notfounds += 1
        elif slot == 2:  # noqa: PLR2004
            notes += 1
    return CacheStatistics(founds=founds, notfounds=notfounds, notes=notes, last_found=last_found)


def verify_cache_statistics(
    cache: Geocache,
    logs: Iterable[LogEntry],
    policy: BranchPolicy,
) -> CacheStatistics:
    """Raise ``ConsistencyFault`` unless the stored counters match the history."""
    expected = replay_cache_statistics(logs, policy)
    stored = CacheStatistics(
        founds=cache.founds,
        notfounds=cache.notfounds,
        notes=cache.notes,
        last_found=cache.last_found,
    )
    if stored != expected:
        raise ConsistencyFault(
            f"Statistics of cache {cache.code} diverge from its log history: "
            f"stored {stored}, replayed {expected}"
        )
    return expected


def _latest_active_find(entries: Iterable[LogEntry], policy: BranchPolicy) -> datetime | None:
    dates = [
        entry.date
        for entry in entries
        if entry.type in FOUND_LOG_TYPES and policy.is_active_log(entry)
    ]
    return max(dates, default=None)


class StatisticsUpdater:
    def __init__(self, *, policy: BranchPolicy, assets: AssetInvalidator) -> None:
        self._policy = policy
        self._assets = assets

    def apply(
        self,
        repositories: GeokeeperRepositories,
        cache: Geocache,
        user_id: UUID,
        transition: LogTransition,
    ) -> None:
        """Update everything derived from one log transition.

        Runs inside the transaction, after the log row itself has been written.
        """
        if not self._policy.statistics_maintained_by_triggers:
            self._update_cache_stats(repositories, cache, transition)
        if not transition.type_changed:
            return
        if not self._policy.statistics_maintained_by_triggers:
            self._update_user_stats(repositories, user_id, transition)
        if transition.old_type in FOUND_LOG_TYPES:
            self._discard_recommendation_and_rating(repositories, cache, user_id)

    def _update_cache_stats(
        self,
        repositories: GeokeeperRepositories,
        cache: Geocache,
        transition: LogTransition,
    ) -> None:
        found, not_found, comment = cache_counter_delta(transition.old_type, transition.new_type)
        cache.founds = max(0, cache.founds + found)
        cache.notfounds = max(0, cache.notfounds + not_found)
        cache.notes = max(0, cache.notes + comment)

        is_find = transition.new_type in FOUND_LOG_TYPES
        old_date = transition.old_date
        moved_later = old_date is not None and transition.new_date > old_date
        moved_earlier = old_date is not None and transition.new_date < old_date
        if found > 0 or (found == 0 and is_find and moved_later):
            if cache.last_found is None or transition.new_date > cache.last_found:
                cache.last_found = transition.new_date
        elif found < 0 or (is_find and moved_earlier):
            cache.last_found = _latest_active_find(
                repositories.logs.for_cache(cache.id), self._policy
            )

    def _update_user_stats(
        self,
        repositories: GeokeeperRepositories,
        user_id: UUID,
        transition: LogTransition,
    ) -> None:
        user = repositories.users.get(user_id)
        if user is None:
            raise ConsistencyFault(f"Log author {user_id} does not exist")
        found, not_found, comment = user_counter_delta(transition.old_type, transition.new_type)
        user.adjust_log_counters(found=found, not_found=not_found, comment=comment)

    def _discard_recommendation_and_rating(
        self,
        repositories: GeokeeperRepositories,
        cache: Geocache,
        user_id: UUID,
    ) -> None:
        last_found = _latest_active_find(
            repositories.logs.for_user_and_cache(user_id, cache.id), self._policy
        )
        recommendation = repositories.recommendations.get(cache.id, user_id)
        if recommendation is not None:
            if last_found is None:
                log.info("Removing recommendation of %s by %s", cache.code, user_id)
                repositories.recommendations.delete(recommendation)
            elif self._policy.updates_recommendation_date:
                recommendation.rating_date = last_found

        score = repositories.scores.get(cache.id, user_id)
        if score is not None:
            log.info("Withdrawing rating %.1f of %s by %s", score.score, cache.code, user_id)
            repositories.scores.delete(score)
            cache.withdraw_vote(score.score)

    def invalidate_assets(
        self,
        *,
        actor_id: UUID,
        owner_id: UUID | None,
        old_type: LogType | None,
        new_type: LogType,
    ) -> list[UUID]:
        """Drop statistics pictures affected by a type change; return the users touched."""
        if old_type == new_type or not self._policy.invalidates_statpics:
            return []
        involved = {old_type, new_type}
        users: list[UUID] = []
        if involved & FOUND_LOG_TYPES:
            users.append(actor_id)
        if owner_id is not None and involved & AVAILABILITY_LOG_TYPES:
            users.append(owner_id)
        for user_id in dict.fromkeys(users):
            self._assets.invalidate_user(user_id)
        return users
