"""SQLAlchemy mapping metadata for the geokeeper domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from geokeeper.domain.model import (
    CacheAttribute,
    CacheDescription,
    CacheRecommendation,
    CacheScore,
    CacheSize,
    CacheStatus,
    CacheType,
    Geocache,
    LanguageName,
    LogEntry,
    LogType,
    User,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _value_enum(enum_cls: type[StrEnum]) -> Enum:
    # store enum values so database-side statistics can match log types by text
    return Enum(
        enum_cls,
        native_enum=False,
        values_callable=lambda members: [member.value for member in members],
        length=32,
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

user_table = Table(
    "user_account",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("username", String, nullable=False),
    Column("founds_count", Integer, nullable=False, default=0),
    Column("notfounds_count", Integer, nullable=False, default=0),
    Column("log_notes_count", Integer, nullable=False, default=0),
)

cache_table = Table(
    "cache",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("code", String(16), nullable=False, unique=True),
    Column("node", String(32), nullable=False),
    Column("owner_id", UUIDColumnType, ForeignKey("user_account.id"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("type", _value_enum(CacheType), nullable=False),
    Column("size", _value_enum(CacheSize), nullable=False),
    Column("status", _value_enum(CacheStatus), nullable=False),
    Column("difficulty", Float, nullable=False),
    Column("terrain", Float, nullable=False),
    Column("latitude", Float, nullable=False),
    Column("longitude", Float, nullable=False),
    Column("trip_time", Float, nullable=False, default=0.0),
    Column("trip_distance", Float, nullable=False, default=0.0),
    Column("gc_code", String(7), nullable=False, default=""),
    Column("password", String(20), nullable=False, default=""),
    Column("date_created", UTCDateTime(), nullable=False),
    Column("date_hidden", UTCDateTime(), nullable=False),
    Column("last_modified", UTCDateTime(), nullable=True),
    Column("founds", Integer, nullable=False, default=0),
    Column("notfounds", Integer, nullable=False, default=0),
    Column("notes", Integer, nullable=False, default=0),
    Column("last_found", UTCDateTime(), nullable=True),
    Column("score", Float, nullable=False, default=0.0),
    Column("votes", Integer, nullable=False, default=0),
    Column("desc_languages", String(60), nullable=False, default=""),
    Column("default_desc_lang", String(2), nullable=False, default=""),
)
Index(None, cache_table.c.owner_id)

cache_description_table = Table(
    "cache_description",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("cache_id", UUIDColumnType, ForeignKey("cache.id"), nullable=False),
    Column("language", String(2), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("description_html", Integer, nullable=False, default=1),
    Column("short_description", String(120), nullable=False, default=""),
    Column("hint", Text, nullable=False, default=""),
    Column("date_created", UTCDateTime(), nullable=True),
    Column("last_modified", UTCDateTime(), nullable=True),
    UniqueConstraint("cache_id", "language"),
)

cache_attribute_table = Table(
    "cache_attribute",
    mapper_registry.metadata,
    Column("cache_id", UUIDColumnType, ForeignKey("cache.id"), primary_key=True),
    Column("acode", String(8), primary_key=True),
)

cache_log_table = Table(
    "cache_log",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("cache_id", UUIDColumnType, ForeignKey("cache.id"), nullable=False),
    Column("user_id", UUIDColumnType, ForeignKey("user_account.id"), nullable=False),
    Column("node", String(32), nullable=False),
    Column("type", _value_enum(LogType), nullable=False),
    Column("date", UTCDateTime(), nullable=False),
    Column("text", Text, nullable=False, default=""),
    Column("text_html", Integer, nullable=False, default=1),
    Column("deleted", Boolean, nullable=False, default=False),
    Column("date_created", UTCDateTime(), nullable=True),
    Column("last_modified", UTCDateTime(), nullable=True),
)
Index(None, cache_log_table.c.cache_id, cache_log_table.c.user_id)

cache_score_table = Table(
    "cache_score",
    mapper_registry.metadata,
    Column("cache_id", UUIDColumnType, ForeignKey("cache.id"), primary_key=True),
    Column("user_id", UUIDColumnType, ForeignKey("user_account.id"), primary_key=True),
    Column("score", Float, nullable=False),
)

cache_recommendation_table = Table(
    "cache_recommendation",
    mapper_registry.metadata,
    Column("cache_id", UUIDColumnType, ForeignKey("cache.id"), primary_key=True),
    Column("user_id", UUIDColumnType, ForeignKey("user_account.id"), primary_key=True),
    Column("rating_date", UTCDateTime(), nullable=True),
)

language_table = Table(
    "language_name",
    mapper_registry.metadata,
    Column("code", String(2), primary_key=True),
    Column("translation_language", String(2), primary_key=True),
    Column("name", String(60), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(User, user_table)
    mapper_registry.map_imperatively(Geocache, cache_table)
    mapper_registry.map_imperatively(CacheDescription, cache_description_table)
    mapper_registry.map_imperatively(CacheAttribute, cache_attribute_table)
    mapper_registry.map_imperatively(LogEntry, cache_log_table)
    mapper_registry.map_imperatively(CacheScore, cache_score_table)
    mapper_registry.map_imperatively(CacheRecommendation, cache_recommendation_table)
    mapper_registry.map_imperatively(LanguageName, language_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(bind: Engine | Connection) -> None:
    """Create database tables for the mapped metadata."""

    mapper_registry.metadata.create_all(bind)
