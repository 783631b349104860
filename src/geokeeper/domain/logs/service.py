"""Log publication and log edit use cases."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from geokeeper.domain.cache_edit.service import load_cache_snapshot
from geokeeper.domain.errors import BadRequest, ConsistencyFault, NotFound
from geokeeper.domain.logs.comments import parse_comment_format
from geokeeper.domain.logs.dto import EditLogResult, LogTransition, PublishLogResult
from geokeeper.domain.logs.rules import matching_log_type, parse_log_type, parse_when
from geokeeper.domain.logs.statistics import verify_cache_statistics
from geokeeper.domain.model import (
    FOUND_LOG_TYPES,
    SEARCH_LOG_TYPES,
    CacheRecommendation,
    CacheScore,
    CacheSnapshot,
    LogEntry,
    LogSnapshot,
)
from geokeeper.domain.transaction import StagedWrite

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from uuid import UUID

    from geokeeper.domain.logs.comments import CommentEncoder
    from geokeeper.domain.logs.dto import CacheStatistics
    from geokeeper.domain.logs.rules import LogRuleEngine
    from geokeeper.domain.logs.statistics import StatisticsUpdater
    from geokeeper.domain.model import Geocache, LogType
    from geokeeper.domain.policy import BranchPolicy
    from geokeeper.domain.ports.unit_of_work import GeokeeperRepositories, GeokeeperUnitOfWork
    from geokeeper.domain.transaction import TransactionCoordinator

log = logging.getLogger(__name__)

LOG_INSERT = "log_insert"
LOG_UPDATE = "log_update"


class LogService:
    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], GeokeeperUnitOfWork],
        coordinator: TransactionCoordinator,
        rules: LogRuleEngine,
        comments: CommentEncoder,
        statistics: StatisticsUpdater,
        policy: BranchPolicy,
        node_id: str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._coordinator = coordinator
        self._rules = rules
        self._comments = comments
        self._statistics = statistics
        self._policy = policy
        self._node_id = node_id
        self._clock = clock or (lambda: datetime.now(UTC))

    # publish ------------------------------------------------------------------

    def publish(
        self,
        cache_code: str,
        actor_id: UUID,
        logtype: Any,
        when: Any,
        comment: str,
        comment_format: Any = None,
        password: str | None = None,
        *,
        recommend: bool = False,
        rating: Any = None,
    ) -> PublishLogResult:
        new_type = parse_log_type(logtype)
        text_format = parse_comment_format(comment_format)
        comment = comment or ""

        with self._unit_of_work_factory() as uow:
            repos = uow.repositories
            cache = load_cache_snapshot(repos, cache_code)
            user = repos.users.get(actor_id)
            if user is None:
                raise NotFound(f"User {actor_id} does not exist")
            prior_logs = [
                LogSnapshot.from_entity(entry)
                for entry in repos.logs.for_user_and_cache(actor_id, cache.id)
            ]
            user_founds = user.founds_count
            recommendations_given = repos.recommendations.count_for_user(actor_id)
            already_recommended = repos.recommendations.get(cache.id, actor_id) is not None

        self._check_node(cache)
        self._rules.check_type_matches_cache(new_type, cache)
        self._rules.check_password(new_type, cache, password)
        self._rules.check_comment(comment, new_type)
        date = parse_when(when)
        self._rules.check_when(date, new_type, cache.date_hidden)
        self._rules.check_find_allowed(new_type, cache, actor_id, prior_logs)
        score = self._rules.parse_rating(rating, new_type)
        if recommend and not already_recommended:
            self._rules.check_recommendation(
                new_type, user_founds=user_founds, recommendations_given=recommendations_given
            )

        text, text_html = self._comments.encode(comment, text_format)
        now = self._clock()
        entry = LogEntry(
            cache_id=cache.id,
            user_id=actor_id,
            node=self._node_id,
            type=new_type,
            date=date,
            text=text,
            text_html=text_html,
            date_created=now,
            last_modified=now,
        )
        existing: list[UUID] = []

        def not_yet_published(repos: GeokeeperRepositories) -> bool:
            duplicate = self._find_duplicate(repos, entry)
            if duplicate is not None:
                existing.append(duplicate.id)
                return False
            return True

        writes = [
            StagedWrite(
                name=LOG_INSERT,
                apply=lambda repos: repos.logs.add(entry),
                precondition=not_yet_published,
            ),
            StagedWrite(
                name="statistics",
                apply=lambda repos: self._statistics.apply(
                    repos,
                    self._get_cache(repos, cache.id),
                    actor_id,
                    LogTransition(new_type=new_type, new_date=date),
                ),
                requires=(LOG_INSERT,),
            ),
        ]
        if recommend and not already_recommended:
            writes.append(
                StagedWrite(
                    name="recommendation",
                    apply=lambda repos: repos.recommendations.add(
                        CacheRecommendation(cache_id=cache.id, user_id=actor_id, rating_date=date)
                    ),
                    precondition=lambda repos: repos.recommendations.get(cache.id, actor_id)
                    is None,
                    requires=(LOG_INSERT,),
                )
            )
        if score is not None:
            writes.append(
                StagedWrite(
                    name="rating",
                    apply=lambda repos: self._add_rating(repos, cache.id, actor_id, score),
                    precondition=lambda repos: repos.scores.get(cache.id, actor_id) is None,
                    requires=(LOG_INSERT,),
                )
            )

        outcome = self._coordinator.run(writes)
        if LOG_INSERT in outcome.skipped:
            log.info("Duplicate %s log on %s by %s ignored", new_type, cache.code, actor_id)
            return PublishLogResult(log_id=existing[0], duplicate=True)

        self._statistics.invalidate_assets(
            actor_id=actor_id, owner_id=cache.owner_id, old_type=None, new_type=new_type
        )
        log.info("Published %s log %s on %s", new_type, entry.id, cache.code)
        return PublishLogResult(log_id=entry.id)

    def _find_duplicate(self, repos: GeokeeperRepositories, entry: LogEntry) -> LogEntry | None:
        """A log from a concurrent identical submit, or a now-forbidden second find."""
        for prior in repos.logs.for_user_and_cache(entry.user_id, entry.cache_id):
            if prior.id == entry.id or not self._policy.is_active_log(prior):
                continue
            if prior.type is entry.type and prior.date == entry.date and prior.text == entry.text:
                return prior
            if (
                not self._policy.allows_multiple_finds
                and entry.type in SEARCH_LOG_TYPES
                and prior.type is matching_log_type(entry.type)
            ):
                return prior
        return None

    def _add_rating(
        self, repos: GeokeeperRepositories, cache_id: UUID, user_id: UUID, score: int
    ) -> None:
        repos.scores.add(CacheScore(cache_id=cache_id, user_id=user_id, score=float(score)))
        self._get_cache(repos, cache_id).add_vote(float(score))

    # edit ---------------------------------------------------------------------

    def edit(self, log_id: UUID, actor_id: UUID, changes: Mapping[str, Any]) -> EditLogResult:
        with self._unit_of_work_factory() as uow:
            repos = uow.repositories
            entry = repos.logs.get(log_id)
            if entry is None:
                raise NotFound(f"Log entry {log_id} does not exist")
            current = LogSnapshot.from_entity(entry)
            cache_entity = self._get_cache(repos, entry.cache_id)
            cache = CacheSnapshot.from_entity(cache_entity)
            prior_logs = [
                LogSnapshot.from_entity(other)
                for other in repos.logs.for_user_and_cache(entry.user_id, entry.cache_id)
                if other.id != entry.id
            ]

        if current.node != self._node_id:
            raise ConsistencyFault(
                f"This site's database contains the log entry '{log_id}' which has been "
                "imported from another node."
            )
        self._check_node(cache)
        if current.user_id != actor_id:
            raise BadRequest("Only own log entries may be edited.")
        if not self._policy.is_active_log(current):
            raise BadRequest("Deleted log entries cannot be edited.")

        new_type = parse_log_type(changes["logtype"]) if "logtype" in changes else current.type
        date = parse_when(changes["when"]) if "when" in changes else current.date

        if new_type != current.type:
            self._rules.check_type_matches_cache(new_type, cache)
            if current.type not in FOUND_LOG_TYPES:
                self._rules.check_password(new_type, cache, changes.get("password"))
            self._rules.check_find_allowed(
                new_type, cache, actor_id, prior_logs, old_type=current.type
            )
        if "when" in changes or new_type != current.type:
            self._rules.check_when(date, new_type, cache.date_hidden)

        text: str | None = None
        text_html: int | None = None
        if "comment" in changes:
            comment = str(changes["comment"] or "")
            self._rules.check_comment(comment, new_type)
            text, text_html = self._comments.encode(
                comment, parse_comment_format(changes.get("comment_format"))
            )
        elif new_type != current.type:
            self._rules.check_comment(current.text, new_type)

        if new_type == current.type and date == current.date and text in (None, current.text):
            return EditLogResult(applied=False)

        writes = [
            StagedWrite(
                name=LOG_UPDATE,
                apply=lambda repos: self._update_entry(repos, log_id, new_type, date, text, text_html),
                precondition=lambda repos: self._unchanged_since_read(repos, current),
            ),
            StagedWrite(
                name="statistics",
                apply=lambda repos: self._statistics.apply(
                    repos,
                    self._get_cache(repos, current.cache_id),
                    current.user_id,
                    LogTransition(
                        new_type=new_type,
                        new_date=date,
                        old_type=current.type,
                        old_date=current.date,
                    ),
                ),
                requires=(LOG_UPDATE,),
            ),
        ]
        outcome = self._coordinator.run(writes)
        applied = LOG_UPDATE in outcome.applied
        if applied:
            self._statistics.invalidate_assets(
                actor_id=actor_id,
                owner_id=cache.owner_id,
                old_type=current.type,
                new_type=new_type,
            )
            log.info("Edited log %s: %s -> %s", log_id, current.type, new_type)
        return EditLogResult(applied=applied)

    def _unchanged_since_read(self, repos: GeokeeperRepositories, current: LogSnapshot) -> bool:
        entry = repos.logs.get(current.id)
        return (
            entry is not None
            and entry.type is current.type
            and entry.date == current.date
            and entry.text == current.text
            and self._policy.is_active_log(entry)
        )

    def _update_entry(
        self,
        repos: GeokeeperRepositories,
        log_id: UUID,
        new_type: LogType,
        date: datetime,
        text: str | None,
        text_html: int | None,
    ) -> None:
        entry = repos.logs.get(log_id)
        if entry is None:
            raise NotFound(f"Log entry {log_id} does not exist")
        entry.type = new_type
        entry.date = date
        if text is not None and text_html is not None:
            entry.text = text
            entry.text_html = text_html
        if self._policy.sets_last_modified_explicitly:
            entry.last_modified = self._clock()

    # consistency --------------------------------------------------------------

    def verify_statistics(self, cache_code: str) -> CacheStatistics:
        with self._unit_of_work_factory() as uow:
            repos = uow.repositories
            cache = repos.caches.get_by_code(cache_code)
            if cache is None:
                raise NotFound(f"Cache '{cache_code}' does not exist")
            return verify_cache_statistics(cache, repos.logs.for_cache(cache.id), self._policy)

    # helpers ------------------------------------------------------------------

    def _check_node(self, cache: CacheSnapshot) -> None:
        if cache.node != self._node_id:
            raise ConsistencyFault(
                f"This site's database contains the geocache '{cache.code}' which has been "
                "imported from another node."
            )

    @staticmethod
    def _get_cache(repos: GeokeeperRepositories, cache_id: UUID) -> Geocache:
        cache = repos.caches.get(cache_id)
        if cache is None:
            raise NotFound(f"Cache {cache_id} does not exist")
        return cache
