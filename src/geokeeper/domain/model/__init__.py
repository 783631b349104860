"""Public domain model surface."""

from __future__ import annotations

from geokeeper.domain.model.cache import CacheAttribute, Geocache
from geokeeper.domain.model.catalog import AttributeInfo
from geokeeper.domain.model.description import CacheDescription, LanguageName
from geokeeper.domain.model.entity import Entity, new_id
from geokeeper.domain.model.enums import (
    BranchVariant,
    CacheSize,
    CacheStatus,
    CacheType,
    CommentFormat,
    LogType,
)
from geokeeper.domain.model.log import (
    AVAILABILITY_LOG_TYPES,
    EVENT_LOG_TYPES,
    FOUND_LOG_TYPES,
    NOT_FOUND_LOG_TYPES,
    SEARCH_LOG_TYPES,
    LogEntry,
)
from geokeeper.domain.model.primitives import (
    HALF_POINT_RATINGS,
    Acode,
    CacheCode,
    Coordinates,
    LanguageCode,
)
from geokeeper.domain.model.rating import CacheRecommendation, CacheScore
from geokeeper.domain.model.snapshots import CacheSnapshot, LogSnapshot
from geokeeper.domain.model.user import User

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    # cache
    "Geocache",
    "CacheAttribute",
    "CacheDescription",
    "LanguageName",
    "AttributeInfo",
    # logs
    "LogEntry",
    "FOUND_LOG_TYPES",
    "NOT_FOUND_LOG_TYPES",
    "SEARCH_LOG_TYPES",
    "EVENT_LOG_TYPES",
    "AVAILABILITY_LOG_TYPES",
    # users and ratings
    "User",
    "CacheScore",
    "CacheRecommendation",
    # snapshots
    "CacheSnapshot",
    "LogSnapshot",
    # enums
    "BranchVariant",
    "CacheSize",
    "CacheStatus",
    "CacheType",
    "CommentFormat",
    "LogType",
    # primitives
    "Acode",
    "CacheCode",
    "Coordinates",
    "LanguageCode",
    "HALF_POINT_RATINGS",
]
