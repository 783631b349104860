"""SQLAlchemy adapter package for geokeeper."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyAttributeLinkRepository,
    SqlAlchemyCacheRepository,
    SqlAlchemyDescriptionRepository,
    SqlAlchemyLanguageNameRepository,
    SqlAlchemyLogRepository,
    SqlAlchemyRecommendationRepository,
    SqlAlchemyScoreRepository,
    SqlAlchemyUserRepository,
)
from .triggers import drop_statistics_triggers, install_statistics_triggers

__all__ = [
    "SqlAlchemyAttributeLinkRepository",
    "SqlAlchemyCacheRepository",
    "SqlAlchemyDescriptionRepository",
    "SqlAlchemyLanguageNameRepository",
    "SqlAlchemyLogRepository",
    "SqlAlchemyRecommendationRepository",
    "SqlAlchemyScoreRepository",
    "SqlAlchemyUserRepository",
    "create_all_tables",
    "drop_statistics_triggers",
    "install_statistics_triggers",
    "mapper_registry",
    "start_mappers",
]
