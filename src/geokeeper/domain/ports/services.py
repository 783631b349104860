"""Ports for the collaborators the core consults but does not own."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from uuid import UUID

    from geokeeper.domain.model import AttributeInfo, CacheSize, CacheType


@runtime_checkable
class AttributeCatalog(Protocol):
    """Attribute definitions, filtered to the codes used on this site."""

    def get(self, acode: str) -> AttributeInfo | None: ...


@runtime_checkable
class CapabilityService(Protocol):
    """What this site supports: cache types, sizes, password length, languages."""

    def cache_types(self) -> frozenset[CacheType]: ...

    def cache_sizes(self) -> frozenset[CacheSize]: ...

    def sizes_for_type(self, cache_type: CacheType) -> frozenset[CacheSize]: ...

    def password_max_length(self, cache_type: CacheType) -> int: ...

    def languages(self, langprefs: Sequence[str]) -> Mapping[str, str]:
        """Upper-case language code -> display name in the preferred language."""
        ...


@runtime_checkable
class Localizer(Protocol):
    def translate(self, message: str, langprefs: Sequence[str]) -> str: ...


@runtime_checkable
class HtmlSanitizer(Protocol):
    def purify(self, html: str) -> tuple[str, int]:
        """Return the cleaned markup and the format flag to store alongside it."""
        ...


@runtime_checkable
class AssetInvalidator(Protocol):
    """Drops cached per-user derived files (statistics pictures)."""

    def invalidate_user(self, user_id: UUID) -> None: ...
