"""Per-language cache descriptions and the language dictionary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from geokeeper.domain.model.entity import Entity

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class CacheDescription(Entity):
    """Listing texts for one (cache, language) pair.

    ``language`` is stored upper-case. ``description_html`` records the format
    flag returned by the HTML sanitizer for ``description``.
    """

    cache_id: UUID
    language: str
    description: str = ""
    description_html: int = 1
    short_description: str = ""
    hint: str = ""
    date_created: datetime | None = None
    last_modified: datetime | None = None

    @property
    def is_blank(self) -> bool:
        return not (self.description or self.short_description or self.hint)


@dataclass(eq=False, kw_only=True)
class LanguageName:
    """Display name of ``code`` in ``translation_language``."""

    code: str
    translation_language: str
    name: str
