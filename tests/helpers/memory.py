"""In-memory unit of work with copy-on-enter isolation.

Each unit of work works on a copy of the store's data; ``commit``
publishes the copy. Uncommitted work is discarded, which mirrors a rollback.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Literal
from uuid import UUID

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
from geokeeper.domain.ports.unit_of_work import GeokeeperRepositories

if TYPE_CHECKING:
    from types import TracebackType


class DuplicateKeyError(RuntimeError):
    """Stands in for a unique constraint violation."""


@dataclass(slots=True)
class MemoryData:
    caches: dict[UUID, Geocache] = field(default_factory=dict[UUID, Geocache])
    attributes: set[tuple[UUID, str]] = field(default_factory=set[tuple[UUID, str]])
    descriptions: dict[tuple[UUID, str], CacheDescription] = field(
        default_factory=dict[tuple[UUID, str], CacheDescription]
    )
    logs: dict[UUID, LogEntry] = field(default_factory=dict[UUID, LogEntry])
    users: dict[UUID, User] = field(default_factory=dict[UUID, User])
    scores: dict[tuple[UUID, UUID], CacheScore] = field(
        default_factory=dict[tuple[UUID, UUID], CacheScore]
    )
    recommendations: dict[tuple[UUID, UUID], CacheRecommendation] = field(
        default_factory=dict[tuple[UUID, UUID], CacheRecommendation]
    )
    languages: list[LanguageName] = field(default_factory=list[LanguageName])

    def copy(self) -> MemoryData:
        return MemoryData(
            caches={key: replace(value) for key, value in self.caches.items()},
            attributes=set(self.attributes),
            descriptions={key: replace(value) for key, value in self.descriptions.items()},
            logs={key: replace(value) for key, value in self.logs.items()},
            users={key: replace(value) for key, value in self.users.items()},
            scores={key: replace(value) for key, value in self.scores.items()},
            recommendations={
                key: replace(value) for key, value in self.recommendations.items()
            },
            languages=[replace(row) for row in self.languages],
        )


class MemoryCacheRepository:
    def __init__(self, data: MemoryData) -> None:
        self._data = data

    def add(self, entity: Geocache) -> None:
        self._data.caches[entity.id] = entity

    def get(self, cache_id: UUID) -> Geocache | None:
        return self._data.caches.get(cache_id)

    def get_by_code(self, code: str) -> Geocache | None:
        return next((c for c in self._data.caches.values() if c.code == code.upper()), None)


class MemoryAttributeLinkRepository:
    def __init__(self, data: MemoryData) -> None:
        self._data = data

    def add(self, entity: CacheAttribute) -> None:
        self._data.attributes.add((entity.cache_id, entity.acode))

    def codes_for(self, cache_id: UUID) -> set[str]:
        return {acode for owner, acode in self._data.attributes if owner == cache_id}

    def remove(self, cache_id: UUID, acode: str) -> None:
        self._data.attributes.discard((cache_id, acode))


class MemoryDescriptionRepository:
    def __init__(self, data: MemoryData) -> None:
        self._data = data

    def add(self, entity: CacheDescription) -> None:
        key = (entity.cache_id, entity.language.upper())
        if key in self._data.descriptions:
            raise DuplicateKeyError(f"description {key} already exists")
        self._data.descriptions[key] = entity

    def get(self, cache_id: UUID, language: str) -> CacheDescription | None:
        return self._data.descriptions.get((cache_id, language.upper()))

    def languages(self, cache_id: UUID) -> list[str]:
        return sorted(lang for owner, lang in self._data.descriptions if owner == cache_id)

    def delete(self, description: CacheDescription) -> None:
        del self._data.descriptions[(description.cache_id, description.language.upper())]


class MemoryLogRepository:
    def __init__(self, data: MemoryData) -> None:
        self._data = data

    def add(self, entity: LogEntry) -> None:
        self._data.logs[entity.id] = entity

    def get(self, log_id: UUID) -> LogEntry | None:
        return self._data.logs.get(log_id)

    def for_cache(self, cache_id: UUID) -> list[LogEntry]:
        entries = [entry for entry in self._data.logs.values() if entry.cache_id == cache_id]
        return sorted(entries, key=lambda entry: entry.date)

    def for_user_and_cache(self, user_id: UUID, cache_id: UUID) -> list[LogEntry]:
        return [entry for entry in self.for_cache(cache_id) if entry.user_id == user_id]


class MemoryUserRepository:
    def __init__(self, data: MemoryData) -> None:
        self._data = data

    def add(self, entity: User) -> None:
        self._data.users[entity.id] = entity

    def get(self, user_id: UUID) -> User | None:
        return self._data.users.get(user_id)


class MemoryScoreRepository:
    def __init__(self, data: MemoryData) -> None:
        self._data = data

    def add(self, entity: CacheScore) -> None:
        self._data.scores[(entity.cache_id, entity.user_id)] = entity

    def get(self, cache_id: UUID, user_id: UUID) -> CacheScore | None:
        return self._data.scores.get((cache_id, user_id))

    def delete(self, score: CacheScore) -> None:
        del self._data.scores[(score.cache_id, score.user_id)]


class MemoryRecommendationRepository:
    def __init__(self, data: MemoryData) -> None:
        self._data = data

    def add(self, entity: CacheRecommendation) -> None:
        self._data.recommendations[(entity.cache_id, entity.user_id)] = entity

    def get(self, cache_id: UUID, user_id: UUID) -> CacheRecommendation | None:
        return self._data.recommendations.get((cache_id, user_id))

    def delete(self, recommendation: CacheRecommendation) -> None:
        del self._data.recommendations[(recommendation.cache_id, recommendation.user_id)]

    def count_for_user(self, user_id: UUID) -> int:
        return sum(1 for _, owner in self._data.recommendations if owner == user_id)


class MemoryLanguageNameRepository:
    def __init__(self, data: MemoryData) -> None:
        self._data = data

    def add(self, entity: LanguageName) -> None:
        self._data.languages.append(entity)

    def list_all(self) -> list[LanguageName]:
        return list(self._data.languages)


def build_repositories(data: MemoryData) -> GeokeeperRepositories:
    return GeokeeperRepositories(
        caches=MemoryCacheRepository(data),
        attributes=MemoryAttributeLinkRepository(data),
        descriptions=MemoryDescriptionRepository(data),
        logs=MemoryLogRepository(data),
        users=MemoryUserRepository(data),
        scores=MemoryScoreRepository(data),
        recommendations=MemoryRecommendationRepository(data),
        languages=MemoryLanguageNameRepository(data),
    )


@dataclass
class MemoryStore:
    data: MemoryData = field(default_factory=MemoryData)
    opened: int = 0
    commits: int = 0
    rollbacks: int = 0

    @property
    def repositories(self) -> GeokeeperRepositories:
        """Direct access to the committed data, for seeding and assertions."""
        return build_repositories(self.data)

    def unit_of_work(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self)


class InMemoryUnitOfWork:
    def __init__(self, store: MemoryStore) -> None:
        self._store = store
        self._working: MemoryData | None = None
        self._repositories: GeokeeperRepositories | None = None

    def __enter__(self) -> InMemoryUnitOfWork:
        self._store.opened += 1
        self._working = self._store.data.copy()
        self._repositories = build_repositories(self._working)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self._working = None
        self._repositories = None
        return False

    @property
    def repositories(self) -> GeokeeperRepositories:
        assert self._repositories is not None, "unit of work not entered"
        return self._repositories

    def commit(self) -> None:
        assert self._working is not None, "unit of work not entered"
        self._store.data = self._working
        self._working = self._working.copy()
        self._repositories = build_repositories(self._working)
        self._store.commits += 1

    def rollback(self) -> None:
        self._store.rollbacks += 1
