"""Ports for reading and persisting the editing subsystem's aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from geokeeper.domain.model import (
    CacheAttribute,
    CacheDescription,
    CacheRecommendation,
    CacheScore,
    Geocache,
    LanguageName,
    LogEntry,
    User,
)

if TYPE_CHECKING:
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class CacheRepository(Repository[Geocache], Protocol):
    """Cache reader; returns the current record by code or identity."""

    def get(self, cache_id: UUID) -> Geocache | None: ...

    def get_by_code(self, code: str) -> Geocache | None: ...


@runtime_checkable
class AttributeLinkRepository(Repository[CacheAttribute], Protocol):
    def codes_for(self, cache_id: UUID) -> set[str]: ...

    def remove(self, cache_id: UUID, acode: str) -> None: ...


@runtime_checkable
class DescriptionRepository(Repository[CacheDescription], Protocol):
    def get(self, cache_id: UUID, language: str) -> CacheDescription | None: ...

    def languages(self, cache_id: UUID) -> list[str]: ...

    def delete(self, description: CacheDescription) -> None: ...


@runtime_checkable
class LogRepository(Repository[LogEntry], Protocol):
    """Log reader/writer. Soft-deleted rows are returned; callers filter them."""

    def get(self, log_id: UUID) -> LogEntry | None: ...

    def for_cache(self, cache_id: UUID) -> list[LogEntry]: ...

    def for_user_and_cache(self, user_id: UUID, cache_id: UUID) -> list[LogEntry]: ...


@runtime_checkable
class UserRepository(Repository[User], Protocol):
    def get(self, user_id: UUID) -> User | None: ...


@runtime_checkable
class ScoreRepository(Repository[CacheScore], Protocol):
    def get(self, cache_id: UUID, user_id: UUID) -> CacheScore | None: ...

    def delete(self, score: CacheScore) -> None: ...


@runtime_checkable
class RecommendationRepository(Repository[CacheRecommendation], Protocol):
    def get(self, cache_id: UUID, user_id: UUID) -> CacheRecommendation | None: ...

    def delete(self, recommendation: CacheRecommendation) -> None: ...

    def count_for_user(self, user_id: UUID) -> int: ...


@runtime_checkable
class LanguageNameRepository(Repository[LanguageName], Protocol):
    def list_all(self) -> list[LanguageName]: ...
