"""Attribute catalog implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from geokeeper.config.attribute_index import ATTRIBUTE_INDEX_CACHE_TTL_SECONDS

from .schema import AttributeIndex

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from geokeeper.adapters.lookup_cache import ReadThroughCache
    from geokeeper.domain.model import AttributeInfo

    from .client import AttributeIndexClient


class StaticAttributeCatalog:
    """Catalog backed by a fixed set of definitions."""

    def __init__(self, entries: Iterable[AttributeInfo]) -> None:
        self._entries = {entry.acode: entry for entry in entries}

    def get(self, acode: str) -> AttributeInfo | None:
        return self._entries.get(acode)

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_file(cls, path: Path) -> StaticAttributeCatalog:
        """Load an attribute index dump in the service's JSON format."""
        index = AttributeIndex.model_validate_json(path.read_bytes())
        return cls(index.to_domain().values())


class HttpAttributeCatalog:
    """Catalog fetched from the attribute index service through a read-through cache."""

    cache_key = "attrs/attribute_index"

    def __init__(
        self,
        client: AttributeIndexClient,
        cache: ReadThroughCache,
        *,
        ttl: float = ATTRIBUTE_INDEX_CACHE_TTL_SECONDS,
    ) -> None:
        self._client = client
        self._cache = cache
        self._ttl = ttl

    def get(self, acode: str) -> AttributeInfo | None:
        return self._entries().get(acode)

    def _entries(self) -> dict[str, AttributeInfo]:
        return self._cache.get_or_load(
            self.cache_key,
            lambda: self._client.fetch_index().to_domain(),
            ttl=self._ttl,
        )
