"""Site capabilities derived from configuration and the local database."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Final

from geokeeper.domain.model import BranchVariant, CacheSize, CacheType

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from geokeeper.adapters.lookup_cache import ReadThroughCache
    from geokeeper.config import SiteConfig
    from geokeeper.domain.policy import BranchPolicy
    from geokeeper.domain.ports.unit_of_work import GeokeeperUnitOfWork

log = logging.getLogger(__name__)

LANGUAGE_DICT_TTL_SECONDS: Final[float] = 24 * 3600.0

LOCAL_CACHE_TYPES: Final[dict[BranchVariant, frozenset[CacheType]]] = {
    BranchVariant.OCPL: frozenset(
        {
            CacheType.TRADITIONAL,
            CacheType.MULTI,
            CacheType.QUIZ,
            CacheType.VIRTUAL,
            CacheType.EVENT,
            CacheType.WEBCAM,
            CacheType.MOVING,
            CacheType.PODCAST,
            CacheType.OWN,
            CacheType.OTHER,
        }
    ),
    BranchVariant.OCDE: frozenset(
        {
            CacheType.TRADITIONAL,
            CacheType.MULTI,
            CacheType.QUIZ,
            CacheType.VIRTUAL,
            CacheType.EVENT,
            CacheType.WEBCAM,
            CacheType.MOVING,
            CacheType.MATH,
            CacheType.DRIVE_IN,
            CacheType.OTHER,
        }
    ),
}

CONTAINERLESS_TYPES: Final[frozenset[CacheType]] = frozenset(
    {CacheType.VIRTUAL, CacheType.WEBCAM, CacheType.EVENT}
)
CONTAINER_SIZES: Final[dict[BranchVariant, frozenset[CacheSize]]] = {
    BranchVariant.OCPL: frozenset(
        {
            CacheSize.NANO,
            CacheSize.MICRO,
            CacheSize.SMALL,
            CacheSize.REGULAR,
            CacheSize.LARGE,
            CacheSize.XLARGE,
        }
    ),
    BranchVariant.OCDE: frozenset(
        {
            CacheSize.NANO,
            CacheSize.MICRO,
            CacheSize.SMALL,
            CacheSize.REGULAR,
            CacheSize.LARGE,
            CacheSize.XLARGE,
            CacheSize.OTHER,
        }
    ),
}


def default_sizes_by_type(variant: BranchVariant) -> dict[CacheType, frozenset[CacheSize]]:
    table: dict[CacheType, frozenset[CacheSize]] = {}
    for cache_type in LOCAL_CACHE_TYPES[variant]:
        if cache_type in CONTAINERLESS_TYPES:
            table[cache_type] = frozenset({CacheSize.NONE})
        else:
            table[cache_type] = CONTAINER_SIZES[variant]
    return table


def pick_best_language(translations: Mapping[str, str], langprefs: Sequence[str]) -> str:
    for language in langprefs:
        if language.lower() in translations:
            return translations[language.lower()]
    if "en" in translations:
        return translations["en"]
    return next(iter(translations.values()), "")


class LocalCapabilities:
    def __init__(
        self,
        *,
        site: SiteConfig,
        policy: BranchPolicy,
        unit_of_work_factory: Callable[[], GeokeeperUnitOfWork],
        cache: ReadThroughCache,
        sizes_by_type: Mapping[CacheType, Iterable[CacheSize]] | None = None,
    ) -> None:
        self._site = site
        self._policy = policy
        self._unit_of_work_factory = unit_of_work_factory
        self._cache = cache
        table = sizes_by_type if sizes_by_type is not None else default_sizes_by_type(site.branch)
        self._sizes_by_type = {
            cache_type: frozenset(sizes) for cache_type, sizes in table.items()
        }

    def cache_types(self) -> frozenset[CacheType]:
        return frozenset(self._sizes_by_type)

    def cache_sizes(self) -> frozenset[CacheSize]:
        return frozenset(size for sizes in self._sizes_by_type.values() for size in sizes)

    def sizes_for_type(self, cache_type: CacheType) -> frozenset[CacheSize]:
        return self._sizes_by_type.get(cache_type, frozenset())

    def password_max_length(self, cache_type: CacheType) -> int:
        return self._policy.password_max_length(cache_type, self._site.password_column_length)

    def languages(self, langprefs: Sequence[str]) -> dict[str, str]:
        dictionary = self._cache.get_or_load(
            "cachecaps/languages", self._load_language_dict, ttl=LANGUAGE_DICT_TTL_SECONDS
        )
        localized = {
            code: pick_best_language(translations, langprefs)
            for code, translations in dictionary.items()
        }
        return dict(sorted(localized.items(), key=lambda item: item[1]))

    def _load_language_dict(self) -> dict[str, dict[str, str]]:
        dictionary: defaultdict[str, dict[str, str]] = defaultdict(dict)
        with self._unit_of_work_factory() as uow:
            for row in uow.repositories.languages.list_all():
                dictionary[row.code.upper()][row.translation_language.lower()] = row.name
        log.info("Loaded language dictionary with %d languages", len(dictionary))
        return dict(dictionary)

