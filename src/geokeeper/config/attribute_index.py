"""Attribute index service configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .env import optional_env_var, optional_path_env_var, require_env_vars
from .errors import InvalidConfigurationValueError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

if TYPE_CHECKING:
    from pathlib import Path

ATTRIBUTE_INDEX_TIMEOUT_SECONDS = 10.0
# the attribute catalog changes rarely; one day mirrors the language dictionary
ATTRIBUTE_INDEX_CACHE_TTL_SECONDS = 24 * 3600.0
CACHE_MODES = ("memory", "file")


@dataclass(frozen=True, slots=True)
class AttributeIndexConfig:
    """Where to fetch the attribute catalog and how to authenticate."""

    consumer_key: str
    resilience: ResilienceConfig


def _response_cache() -> CacheConfig:
    mode = optional_env_var("GEOKEEPER_ATTRIBUTE_INDEX_CACHE", "memory").lower()
    if mode not in CACHE_MODES:
        raise InvalidConfigurationValueError(
            "GEOKEEPER_ATTRIBUTE_INDEX_CACHE", mode, " or ".join(CACHE_MODES)
        )
    return CacheConfig(persistent=mode == "file", ttl_seconds=ATTRIBUTE_INDEX_CACHE_TTL_SECONDS)


def get_attribute_index_config(*, resilience: ResilienceConfig | None = None) -> AttributeIndexConfig:
    values = require_env_vars(("GEOKEEPER_ATTRIBUTE_INDEX_URL", "GEOKEEPER_CONSUMER_KEY"))
    return AttributeIndexConfig(
        consumer_key=values["GEOKEEPER_CONSUMER_KEY"],
        resilience=resilience
        or ResilienceConfig(
            name="attribute-index",
            base_url=values["GEOKEEPER_ATTRIBUTE_INDEX_URL"],
            timeout_seconds=ATTRIBUTE_INDEX_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            cache=_response_cache(),
        ),
    )


def get_attribute_index_file() -> Path | None:
    """Local attribute index dump used instead of the HTTP service, if configured."""

    return optional_path_env_var("GEOKEEPER_ATTRIBUTE_INDEX_FILE")
