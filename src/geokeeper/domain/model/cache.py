"""Geocache listing aggregate and its attribute links."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from geokeeper.domain.model.entity import Entity
from geokeeper.domain.model.enums import CacheSize, CacheStatus, CacheType

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Geocache(Entity):
    """A geocache listing as persisted by the editing subsystem.

    Counter fields (``founds``, ``notfounds``, ``notes``, ``last_found``) and the
    rating pair (``score``, ``votes``) are derived from the log history; they are
    only touched by the statistics updater.
    """

    code: str
    node: str
    owner_id: UUID
    name: str
    type: CacheType
    size: CacheSize
    status: CacheStatus = CacheStatus.AVAILABLE
    difficulty: float = 1.0
    terrain: float = 1.0
    latitude: float = 0.0
    longitude: float = 0.0
    trip_time: float = 0.0
    trip_distance: float = 0.0
    gc_code: str = ""
    password: str = ""
    date_created: datetime
    date_hidden: datetime
    last_modified: datetime | None = None

    founds: int = 0
    notfounds: int = 0
    notes: int = 0
    last_found: datetime | None = None
    score: float = 0.0
    votes: int = 0

    desc_languages: str = ""
    default_desc_lang: str = ""

    @property
    def requires_password(self) -> bool:
        return bool(self.password)

    def add_vote(self, score: float) -> None:
        """Fold one more rating into the running average."""
        self.score = (self.score * self.votes + score) / (self.votes + 1)
        self.votes += 1

    def withdraw_vote(self, score: float) -> None:
        """Reverse a rating previously folded in by ``add_vote``.

        The average is stored with limited precision, so repeated add/withdraw
        cycles may drift by rounding error.
        """
        self.score = (self.score * self.votes - score) / max(1, self.votes - 1)
        self.votes = max(0, self.votes - 1)
        if self.votes == 0:
            self.score = 0.0


@dataclass(eq=False, kw_only=True)
class CacheAttribute:
    """Link between a cache and an attribute code."""

    cache_id: UUID
    acode: str
