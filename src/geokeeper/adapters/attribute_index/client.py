"""Attribute index HTTP client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from geokeeper.adapters.http_resilience import ResilientClient

from .schema import AttributeIndex

if TYPE_CHECKING:
    from collections.abc import Callable

    from geokeeper.config.attribute_index import AttributeIndexConfig
    from geokeeper.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

ATTRIBUTE_INDEX_PATH = "services/attrs/attribute_index"
ATTRIBUTE_INDEX_FIELDS = "name|is_addable|incompatible_acodes"


class AttributeIndexAPIError(RuntimeError):
    """Raised when the attribute index returns an unexpected response."""


class AttributeIndexClient:
    """Fetches the locally used attribute definitions."""

    def __init__(
        self,
        *,
        config: AttributeIndexConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_index(self, *, langpref: str = "en") -> AttributeIndex:
        return asyncio.run(self._fetch_index_async(langpref=langpref))

    async def _fetch_index_async(self, *, langpref: str) -> AttributeIndex:
        if self._resilience.base_url is None:
            raise AttributeIndexAPIError("Missing attribute index base_url in configuration")
        params = {
            "consumer_key": self._config.consumer_key,
            "fields": ATTRIBUTE_INDEX_FIELDS,
            "only_locally_used": "true",
            "langpref": langpref,
        }
        async with self._client_factory(self._resilience) as client:
            response = await client.get(ATTRIBUTE_INDEX_PATH, params=params)
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise AttributeIndexAPIError("Unexpected attribute index response payload")
        index = AttributeIndex.model_validate(payload)
        log.info("Fetched %d attribute definitions", len(index.root))
        return index
