"""Settings for the outbound HTTP client of the attribute index service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

import httpx

from geokeeper import __version__

USER_AGENT: Final[str] = f"geokeeper/{__version__}"
# the service is read-only; only idempotent requests are ever replayed
RETRYABLE_METHODS: Final[tuple[str, ...]] = ("GET", "HEAD")


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    respect_retry_after_header: bool = True
    status_forcelist: frozenset[int] = field(
        default_factory=lambda: frozenset({429, 502, 503, 504})
    )
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
    )
    backoff_jitter: float = 1.0


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """Response cache; ``persistent`` keeps entries in the data directory between runs."""

    enabled: bool = True
    persistent: bool = False
    ttl_seconds: float | None = None


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = field(default_factory=CacheConfig)
    user_agent: str = USER_AGENT
