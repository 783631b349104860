"""Immutable per-request views of persisted entities.

Validation works exclusively on these records; the mutable entities are only
touched inside the transaction that applies a validated change set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from geokeeper.domain.model.enums import CacheType
from geokeeper.domain.model.primitives import Coordinates

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from geokeeper.domain.model.cache import Geocache
    from geokeeper.domain.model.enums import CacheSize, CacheStatus, LogType
    from geokeeper.domain.model.log import LogEntry


@dataclass(frozen=True, slots=True, kw_only=True)
class CacheSnapshot:
    id: UUID
    code: str
    node: str
    owner_id: UUID
    name: str
    type: CacheType
    size: CacheSize
    status: CacheStatus
    difficulty: float
    terrain: float
    latitude: float
    longitude: float
    trip_time: float
    trip_distance: float
    gc_code: str
    password: str
    date_created: datetime
    date_hidden: datetime
    attribute_codes: frozenset[str]
    description_languages: frozenset[str]

    @classmethod
    def from_entity(
        cls,
        cache: Geocache,
        *,
        attribute_codes: Iterable[str] = (),
        description_languages: Iterable[str] = (),
    ) -> CacheSnapshot:
        return cls(
            id=cache.id,
            code=cache.code,
            node=cache.node,
            owner_id=cache.owner_id,
            name=cache.name,
            type=cache.type,
            size=cache.size,
            status=cache.status,
            difficulty=cache.difficulty,
            terrain=cache.terrain,
            latitude=cache.latitude,
            longitude=cache.longitude,
            trip_time=cache.trip_time,
            trip_distance=cache.trip_distance,
            gc_code=cache.gc_code,
            password=cache.password,
            date_created=cache.date_created,
            date_hidden=cache.date_hidden,
            attribute_codes=frozenset(attribute_codes),
            description_languages=frozenset(lang.upper() for lang in description_languages),
        )

    @property
    def is_event(self) -> bool:
        return self.type is CacheType.EVENT

    @property
    def requires_password(self) -> bool:
        return bool(self.password)

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


@dataclass(frozen=True, slots=True, kw_only=True)
class LogSnapshot:
    id: UUID
    cache_id: UUID
    user_id: UUID
    node: str
    type: LogType
    date: datetime
    text: str
    text_html: int
    deleted: bool

    @classmethod
    def from_entity(cls, entry: LogEntry) -> LogSnapshot:
        return cls(
            id=entry.id,
            cache_id=entry.cache_id,
            user_id=entry.user_id,
            node=entry.node,
            type=entry.type,
            date=entry.date,
            text=entry.text,
            text_html=entry.text_html,
            deleted=entry.deleted,
        )
