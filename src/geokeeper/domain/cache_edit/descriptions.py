"""Per-language description lifecycle.

A description row is created the first time a language receives text,
updated in place afterwards, and deleted once all of its texts are empty,
unless it is the only language the cache has.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from geokeeper.domain.cache_edit.dto import DescriptionChange
from geokeeper.domain.errors import InvalidParameter, MissingParameter, NotFound
from geokeeper.domain.model import CacheDescription
from geokeeper.domain.problems import ProblemMap
from geokeeper.domain.text import escape_html, nl2br, normalize_newlines, single_line
from geokeeper.domain.transaction import StagedWrite

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from uuid import UUID

    from geokeeper.domain.cache_edit.dto import FieldChanges
    from geokeeper.domain.model import CacheSnapshot
    from geokeeper.domain.ports.services import CapabilityService, HtmlSanitizer
    from geokeeper.domain.ports.unit_of_work import GeokeeperRepositories

log = logging.getLogger(__name__)

TEXT_FIELDS = ("description", "short_description", "hint")
# Order in which an empty new translation is reported.
EMPTY_TEXT_PRIORITY = ("description", "hint", "short_description")


def normalize_hint(hint: str) -> str:
    hint = normalize_newlines(escape_html(hint))
    hint = hint.replace("\t", " ").strip()
    return nl2br(hint)


def default_description_language(
    languages: Iterable[str],
    priority: Sequence[str],
) -> str:
    """Pick the first site-priority language that has a description.

    Falls back to the first two characters of the sorted language set.
    """
    present = {language.upper() for language in languages}
    for language in priority:
        if language.upper() in present:
            return language.upper()
    return "".join(sorted(present))[:2]


def join_description_languages(languages: Iterable[str]) -> str:
    return ",".join(sorted({language.upper() for language in languages}))


class DescriptionManager:
    def __init__(
        self,
        *,
        capabilities: CapabilityService,
        sanitizer: HtmlSanitizer,
        language_priority: Sequence[str],
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._capabilities = capabilities
        self._sanitizer = sanitizer
        self._language_priority = tuple(language_priority)
        self._clock = clock or (lambda: datetime.now(UTC))

    # validation ---------------------------------------------------------------

    def prepare(
        self,
        cache: CacheSnapshot,
        changes: FieldChanges,
        *,
        langprefs: Sequence[str],
        translate: Callable[[str], str] = str,
    ) -> tuple[DescriptionChange | None, ProblemMap]:
        problems = ProblemMap()
        raw = {name: changes.get(name) for name in TEXT_FIELDS}
        if all(value is None for value in raw.values()):
            return None, problems

        language = changes.get("language")
        if language is None:
            raise MissingParameter("language")
        language = str(language).upper()
        if language not in self._capabilities.languages(langprefs):
            raise InvalidParameter("language", f"Invalid language code: '{changes['language']}'")

        description: str | None = None
        description_html: int | None = None
        short_description: str | None = None
        hint: str | None = None
        if raw["description"] is not None:
            description = str(raw["description"])
            if description:
                description, description_html = self._sanitizer.purify(description)
        if raw["short_description"] is not None:
            short_description = single_line(str(raw["short_description"]))
        if raw["hint"] is not None:
            hint = normalize_hint(str(raw["hint"]))

        change = DescriptionChange(
            language=language,
            is_new=language not in cache.description_languages,
            description=description,
            description_html=description_html,
            short_description=short_description,
            hint=hint,
        )

        if change.is_new:
            given = change.given_texts
            if not any(given.values()):
                field_name = next(name for name in EMPTY_TEXT_PRIORITY if name in given)
                problems.add(field_name, translate("Please enter some text."))
            elif not description:
                problems.add(
                    "description",
                    translate("Please enter a full description before adding a short "
                              "description or hint in a new language."),
                )
        return change, problems

    # apply --------------------------------------------------------------------

    def staged_writes(self, cache_id: UUID, change: DescriptionChange) -> list[StagedWrite]:
        if change.is_new:
            write = StagedWrite(
                name=f"description:{change.language}:insert",
                apply=lambda repos: self._insert(repos, cache_id, change),
                precondition=lambda repos: repos.descriptions.get(cache_id, change.language) is None,
            )
        else:
            write = StagedWrite(
                name=f"description:{change.language}:update",
                apply=lambda repos: self._update_or_delete(repos, cache_id, change),
                precondition=(
                    lambda repos: repos.descriptions.get(cache_id, change.language) is not None
                ),
            )
        return [
            write,
            StagedWrite(
                name="description_languages",
                apply=lambda repos: self.refresh_cache_languages(repos, cache_id),
            ),
        ]

    def _insert(
        self,
        repositories: GeokeeperRepositories,
        cache_id: UUID,
        change: DescriptionChange,
    ) -> None:
        now = self._clock()
        repositories.descriptions.add(
            CacheDescription(
                cache_id=cache_id,
                language=change.language,
                description=change.description or "",
                description_html=(
                    change.description_html if change.description_html is not None else 1
                ),
                short_description=change.short_description or "",
                hint=change.hint or "",
                date_created=now,
                last_modified=now,
            )
        )
        log.info("Added %s description to cache %s", change.language, cache_id)

    def _update_or_delete(
        self,
        repositories: GeokeeperRepositories,
        cache_id: UUID,
        change: DescriptionChange,
    ) -> None:
        existing = repositories.descriptions.get(cache_id, change.language)
        if existing is None:
            raise NotFound(f"No {change.language} description for cache {cache_id}")

        merged = {name: getattr(existing, name) for name in TEXT_FIELDS}
        merged.update(change.given_texts)
        is_only_language = len(repositories.descriptions.languages(cache_id)) <= 1
        if not any(merged.values()) and not is_only_language:
            repositories.descriptions.delete(existing)
            log.info("Deleted empty %s description of cache %s", change.language, cache_id)
            return

        for name, value in change.given_texts.items():
            setattr(existing, name, value)
        if change.description_html is not None:
            existing.description_html = change.description_html
        existing.last_modified = self._clock()

    def refresh_cache_languages(self, repositories: GeokeeperRepositories, cache_id: UUID) -> None:
        cache = repositories.caches.get(cache_id)
        if cache is None:
            raise NotFound(f"Cache {cache_id} does not exist")
        languages = repositories.descriptions.languages(cache_id)
        cache.desc_languages = join_description_languages(languages)
        cache.default_desc_lang = default_description_language(languages, self._language_priority)
