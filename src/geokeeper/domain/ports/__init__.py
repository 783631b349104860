"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    AttributeLinkRepository,
    CacheRepository,
    DescriptionRepository,
    LanguageNameRepository,
    LogRepository,
    RecommendationRepository,
    Repository,
    ScoreRepository,
    UserRepository,
)
from .services import (
    AssetInvalidator,
    AttributeCatalog,
    CapabilityService,
    HtmlSanitizer,
    Localizer,
)
from .unit_of_work import (
    GeokeeperRepositories,
    GeokeeperUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AssetInvalidator",
    "AttributeCatalog",
    "AttributeLinkRepository",
    "CacheRepository",
    "CapabilityService",
    "DescriptionRepository",
    "GeokeeperRepositories",
    "GeokeeperUnitOfWork",
    "HtmlSanitizer",
    "LanguageNameRepository",
    "Localizer",
    "LogRepository",
    "RecommendationRepository",
    "Repository",
    "RepositoryCollection",
    "ScoreRepository",
    "UnitOfWork",
    "UserRepository",
]
