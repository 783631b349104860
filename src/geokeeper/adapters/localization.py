"""gettext-backed message translation."""

from __future__ import annotations

import gettext
from functools import cache
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

DOMAIN: Final[str] = "geokeeper"


@cache
def _translations(localedir: str, languages: tuple[str, ...]) -> gettext.NullTranslations:
    return gettext.translation(DOMAIN, localedir=localedir, languages=languages, fallback=True)


class GettextLocalizer:
    """Translates messages with the first available catalog of the preference list.

    Catalogs are looked up as ``<localedir>/<lang>/LC_MESSAGES/geokeeper.mo``.
    Without a ``localedir`` every message is returned as given.
    """

    def __init__(self, localedir: Path | None = None) -> None:
        self._localedir = str(localedir) if localedir is not None else None

    def translate(self, message: str, langprefs: Sequence[str]) -> str:
        if self._localedir is None:
            return message
        languages = tuple(language.lower() for language in langprefs if language)
        return _translations(self._localedir, languages).gettext(message)
