"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select

from geokeeper.adapters.sqlalchemy.mappings import (
    cache_attribute_table,
    cache_description_table,
    cache_log_table,
    cache_recommendation_table,
    cache_table,
    language_table,
)
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

    from sqlalchemy.orm import Session


class SqlAlchemyCacheRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Geocache) -> None:
        self.session.add(entity)

    def get(self, cache_id: UUID) -> Geocache | None:
        return self.session.get(Geocache, cache_id)

    def get_by_code(self, code: str) -> Geocache | None:
        stmt = select(Geocache).where(cache_table.c.code == code.upper())
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyAttributeLinkRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CacheAttribute) -> None:
        self.session.add(entity)

    def codes_for(self, cache_id: UUID) -> set[str]:
        stmt = select(cache_attribute_table.c.acode).where(
            cache_attribute_table.c.cache_id == cache_id
        )
        return set(self.session.execute(stmt).scalars())

    def remove(self, cache_id: UUID, acode: str) -> None:
        link = self.session.get(CacheAttribute, (cache_id, acode))
        if link is not None:
            self.session.delete(link)


class SqlAlchemyDescriptionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CacheDescription) -> None:
        entity.language = entity.language.upper()
        self.session.add(entity)

    def get(self, cache_id: UUID, language: str) -> CacheDescription | None:
        stmt = (
            select(CacheDescription)
            .where(cache_description_table.c.cache_id == cache_id)
            .where(cache_description_table.c.language == language.upper())
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def languages(self, cache_id: UUID) -> list[str]:
        stmt = (
            select(cache_description_table.c.language)
            .where(cache_description_table.c.cache_id == cache_id)
            .order_by(cache_description_table.c.language)
        )
        return list(self.session.execute(stmt).scalars())

    def delete(self, description: CacheDescription) -> None:
        self.session.delete(description)


class SqlAlchemyLogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: LogEntry) -> None:
        self.session.add(entity)

    def get(self, log_id: UUID) -> LogEntry | None:
        return self.session.get(LogEntry, log_id)

    def for_cache(self, cache_id: UUID) -> list[LogEntry]:
        stmt = (
            select(LogEntry)
            .where(cache_log_table.c.cache_id == cache_id)
            .order_by(cache_log_table.c.date, cache_log_table.c.date_created)
        )
        return list(self.session.execute(stmt).scalars())

    def for_user_and_cache(self, user_id: UUID, cache_id: UUID) -> list[LogEntry]:
        stmt = (
            select(LogEntry)
            .where(cache_log_table.c.cache_id == cache_id)
            .where(cache_log_table.c.user_id == user_id)
            .order_by(cache_log_table.c.date, cache_log_table.c.date_created)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyUserRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: User) -> None:
        self.session.add(entity)

    def get(self, user_id: UUID) -> User | None:
        return self.session.get(User, user_id)


class SqlAlchemyScoreRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CacheScore) -> None:
        self.session.add(entity)

    def get(self, cache_id: UUID, user_id: UUID) -> CacheScore | None:
        return self.session.get(CacheScore, (cache_id, user_id))

    def delete(self, score: CacheScore) -> None:
        self.session.delete(score)


class SqlAlchemyRecommendationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CacheRecommendation) -> None:
        self.session.add(entity)

    def get(self, cache_id: UUID, user_id: UUID) -> CacheRecommendation | None:
        return self.session.get(CacheRecommendation, (cache_id, user_id))

    def delete(self, recommendation: CacheRecommendation) -> None:
        self.session.delete(recommendation)

    def count_for_user(self, user_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(cache_recommendation_table)
            .where(cache_recommendation_table.c.user_id == user_id)
        )
        return int(self.session.execute(stmt).scalar_one())


class SqlAlchemyLanguageNameRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: LanguageName) -> None:
        self.session.add(entity)

    def list_all(self) -> list[LanguageName]:
        stmt = select(LanguageName).order_by(
            language_table.c.code, language_table.c.translation_language
        )
        return list(self.session.execute(stmt).scalars())
