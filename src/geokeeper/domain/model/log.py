"""Log entries and log type classification tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from geokeeper.domain.model.entity import Entity
from geokeeper.domain.model.enums import LogType

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


FOUND_LOG_TYPES: Final[frozenset[LogType]] = frozenset({LogType.FOUND_IT, LogType.ATTENDED})
NOT_FOUND_LOG_TYPES: Final[frozenset[LogType]] = frozenset(
    {LogType.DIDNT_FIND_IT, LogType.WILL_ATTEND}
)
SEARCH_LOG_TYPES: Final[frozenset[LogType]] = FOUND_LOG_TYPES | NOT_FOUND_LOG_TYPES
EVENT_LOG_TYPES: Final[frozenset[LogType]] = frozenset({LogType.ATTENDED, LogType.WILL_ATTEND})
AVAILABILITY_LOG_TYPES: Final[frozenset[LogType]] = frozenset(
    {LogType.READY_TO_SEARCH, LogType.TEMPORARILY_UNAVAILABLE, LogType.ARCHIVED}
)


@dataclass(eq=False, kw_only=True)
class LogEntry(Entity):
    """A visit or status record against a cache.

    ``text`` holds the comment as stored (HTML); ``text_html`` is the
    original-format flag. ``deleted`` is only ever set on variants that
    soft-delete logs.
    """

    cache_id: UUID
    user_id: UUID
    node: str
    type: LogType
    date: datetime
    text: str = ""
    text_html: int = 1
    deleted: bool = False
    date_created: datetime | None = None
    last_modified: datetime | None = None
