"""Value objects for log publication and log edits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from geokeeper.domain.model import LogType


@dataclass(frozen=True, slots=True)
class LogTransition:
    """A log's type/date moving from ``old`` to ``new``.

    A fresh publication has no old type or date; nothing here represents a
    removal, which this core does not perform.
    """

    new_type: LogType
    new_date: datetime
    old_type: LogType | None = None
    old_date: datetime | None = None

    @property
    def type_changed(self) -> bool:
        return self.old_type != self.new_type


@dataclass(frozen=True, slots=True)
class CacheStatistics:
    founds: int
    notfounds: int
    notes: int
    last_found: datetime | None


@dataclass(frozen=True, slots=True)
class PublishLogResult:
    log_id: UUID
    duplicate: bool = False


@dataclass(frozen=True, slots=True)
class EditLogResult:
    applied: bool
