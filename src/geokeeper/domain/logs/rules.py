"""Publication rules for log entries.

Every violation raises: ``CannotPublish`` for business rules,
``InvalidParameter``/``MissingParameter`` for malformed input. Nothing here
touches persistent state.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Final

from geokeeper.domain.errors import CannotPublish, InvalidParameter
from geokeeper.domain.model import (
    EVENT_LOG_TYPES,
    FOUND_LOG_TYPES,
    SEARCH_LOG_TYPES,
    LogType,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from uuid import UUID

    from geokeeper.domain.model import CacheSnapshot, LogSnapshot
    from geokeeper.domain.policy import BranchPolicy

log = logging.getLogger(__name__)

FUTURE_GRACE: Final[timedelta] = timedelta(minutes=5)

# Transitions that never re-trigger the duplicate-find check.
_DOWNGRADES: Final[frozenset[tuple[LogType, LogType]]] = frozenset(
    {
        (LogType.FOUND_IT, LogType.DIDNT_FIND_IT),
        (LogType.ATTENDED, LogType.WILL_ATTEND),
    }
)
# A "not found" style log collides with a prior log of its found counterpart.
_MATCHING_LOG_TYPE: Final[dict[LogType, LogType]] = {
    LogType.DIDNT_FIND_IT: LogType.FOUND_IT,
    LogType.WILL_ATTEND: LogType.ATTENDED,
}


def matching_log_type(logtype: LogType) -> LogType:
    """The earlier log type that a new ``logtype`` log may not coexist with."""
    return _MATCHING_LOG_TYPE.get(logtype, logtype)


def parse_log_type(raw: Any) -> LogType:
    try:
        return LogType(str(raw))
    except ValueError as exc:
        raise InvalidParameter("logtype", f"'{raw}' is not a valid log type.") from exc


def parse_when(raw: Any) -> datetime:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if isinstance(raw, datetime):
        when = raw
    else:
        try:
            when = datetime.fromisoformat(str(raw))
        except ValueError as exc:
            raise InvalidParameter(
                "when", f"'{raw}' is not in a valid format or is not a valid date."
            ) from exc
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return when


class LogRuleEngine:
    def __init__(
        self,
        *,
        policy: BranchPolicy,
        founds_per_recommendation: int,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._policy = policy
        self._founds_per_recommendation = founds_per_recommendation
        self._clock = clock or (lambda: datetime.now(UTC))

    def check_type_matches_cache(self, logtype: LogType, cache: CacheSnapshot) -> None:
        if cache.is_event:
            if logtype in {LogType.FOUND_IT, LogType.DIDNT_FIND_IT}:
                raise CannotPublish(
                    'This cache is an Event cache. You cannot "Find" it (but you can attend '
                    "it, or comment on it)!"
                )
        elif logtype in EVENT_LOG_TYPES:
            raise CannotPublish(
                'This cache is NOT an Event cache. You cannot "Attend" it (but you can find '
                "it, or comment on it)!"
            )

    def check_password(self, logtype: LogType, cache: CacheSnapshot, password: str | None) -> None:
        if logtype not in FOUND_LOG_TYPES or not cache.requires_password:
            return
        if not password:
            raise CannotPublish("This cache requires a password. You didn't provide one!")
        if password.lower() != cache.password.lower():
            raise CannotPublish("Invalid password!")

    def check_when(self, when: datetime, logtype: LogType, date_hidden: datetime) -> None:
        if when > self._clock() + FUTURE_GRACE:
            raise CannotPublish(
                "You are trying to publish a log entry with a date in future. Cache log "
                "entries are allowed to be published in the past, but NOT in the future."
            )
        hidden = date_hidden if date_hidden.tzinfo else date_hidden.replace(tzinfo=UTC)
        if logtype is LogType.ATTENDED and when < hidden:
            raise CannotPublish(
                "You cannot attend an event before it takes place. Please check the log "
                "type and date."
            )

    def check_comment(self, comment: str, logtype: LogType) -> None:
        if logtype is LogType.COMMENT and not comment.strip():
            raise CannotPublish("You have to supply some text for your comment.")

    def check_find_allowed(
        self,
        new_type: LogType,
        cache: CacheSnapshot,
        actor_id: UUID,
        prior_logs: Iterable[LogSnapshot],
        old_type: LogType | None = None,
    ) -> None:
        """Duplicate-find suppression for variants with one find per user and cache.

        ``prior_logs`` are the actor's logs on ``cache``; the edited log itself
        may be among them.
        """
        if self._policy.allows_multiple_finds:
            return
        if new_type == old_type or new_type not in SEARCH_LOG_TYPES:
            return
        if old_type is not None and (old_type, new_type) in _DOWNGRADES:
            return

        # owners may attend their own events, but not search their own caches
        if actor_id == cache.owner_id and new_type not in EVENT_LOG_TYPES:
            raise CannotPublish(
                'You are the owner of this cache. You may submit "Comments" and status '
                "logs only!"
            )

        matching_type = matching_log_type(new_type)
        for prior in prior_logs:
            if prior.type is matching_type and self._policy.is_active_log(prior):
                log.debug("Actor %s already has a %s log on %s", actor_id, matching_type, cache.code)
                if matching_type is LogType.FOUND_IT:
                    raise CannotPublish(
                        'You have already submitted a "Found it" log entry once. Now you '
                        'may submit "Comments" only!'
                    )
                raise CannotPublish(
                    'You have already submitted an "Attended" log entry once. Now you may '
                    'submit "Comments" only!'
                )

    def check_recommendation(
        self,
        logtype: LogType,
        *,
        user_founds: int,
        recommendations_given: int,
    ) -> None:
        """One recommendation is earned per ``founds_per_recommendation`` finds.

        The find being published counts towards the total.
        """
        if logtype not in FOUND_LOG_TYPES:
            raise InvalidParameter("recommend", "Only finds and attendances may recommend.")
        founds = user_founds + (1 if logtype is LogType.FOUND_IT else 0)
        founds_needed = (recommendations_given + 1) * self._founds_per_recommendation - founds
        if founds_needed > 0:
            if founds_needed == 1:
                message = (
                    "You don't have any recommendations to give. Find one more cache first!"
                )
            else:
                message = (
                    "You don't have any recommendations to give. "
                    f"Find {founds_needed} more caches first!"
                )
            raise CannotPublish(message)

    def parse_rating(self, rating: Any, logtype: LogType) -> int | None:
        if rating is None:
            return None
        if not self._policy.has_ratings:
            raise InvalidParameter("rating", "This site does not support ratings.")
        if logtype not in FOUND_LOG_TYPES:
            raise InvalidParameter("rating", "Only finds and attendances may carry a rating.")
        try:
            value = int(rating)
        except (TypeError, ValueError) as exc:
            raise InvalidParameter("rating", f"'{rating}' is not an integer.") from exc
        if not 1 <= value <= 5:  # noqa: PLR2004
            raise InvalidParameter("rating", "Ratings range from 1 to 5.")
        return value
